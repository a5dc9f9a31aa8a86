"""
Department analytics: per-objective enrichment and department summary.

Each objective gets its computed progress plus a time-based expectation
(linear over the objective window), the variance against it, a health status
derived from that variance and the trend of its last two recorded values.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Dict, List, Optional

from kpi_portal.config import MONTH_NAMES
from kpi_portal.progress import (
    ComputedProgress,
    MonthlyValue,
    Objective,
    ObjectiveType,
    ObjectiveWithValues,
    as_naive_datetime,
    compute_progress,
)


class HealthStatus(str, Enum):
    EXCEEDED = "Exceeded"
    ON_TRACK = "On Track"
    AT_RISK = "At Risk"
    BEHIND = "Behind"


class Trend(str, Enum):
    IMPROVING = "Improving"
    DECLINING = "Declining"
    STABLE = "Stable"


@dataclass
class EnrichedObjective:
    objective: Objective
    computed: ComputedProgress
    expected_progress: float
    variance: float
    health_status: HealthStatus
    trend: Trend
    last_update: Optional[dict] = None
    monthly_values: List[dict] = field(default_factory=list)

    @property
    def progress(self) -> float:
        return self.computed.progress

    def to_dict(self) -> dict:
        obj = self.objective
        data = {
            "id": obj.id,
            "objective_name": obj.display_name,
            "objective_smart": obj.description,
            "department": obj.department,
            "type_objective": obj.type.value,
            "number_format": obj.number_format,
            "target_numeric": obj.target,
            "reverse_logic": obj.reverse_logic,
            "start_date": obj.start_date.isoformat(),
            "end_date": obj.end_date.isoformat(),
            "expected_progress": round(self.expected_progress, 2),
            "time_elapsed": round(self.expected_progress, 2),
            "variance": round(self.variance, 2),
            "health_status": self.health_status.value,
            "trend": self.trend.value,
            "last_update": self.last_update,
            "monthly_values": self.monthly_values,
        }
        data.update(self.computed.to_dict())
        return data


@dataclass
class DepartmentSummary:
    department_name: str
    total_objectives: int
    overall_progress_average: float
    by_health_status: Dict[str, int]
    count_by_type: Dict[str, int]
    top_performer: Optional[dict]
    worst_performer: Optional[dict]

    def to_dict(self) -> dict:
        return {
            "department_name": self.department_name,
            "total_objectives": self.total_objectives,
            "overall_progress_average": self.overall_progress_average,
            "by_health_status": dict(self.by_health_status),
            "count_by_type": dict(self.count_by_type),
            "top_performer": self.top_performer,
            "worst_performer": self.worst_performer,
        }


@dataclass
class DepartmentAnalytics:
    summary: DepartmentSummary
    objectives: List[EnrichedObjective]

    def to_dict(self) -> dict:
        return {
            "department_summary": self.summary.to_dict(),
            "objectives": [o.to_dict() for o in self.objectives],
        }


def expected_progress(start_date: date, end_date: date, as_of) -> float:
    """Linear share of the objective window elapsed at as_of, 0..100."""
    as_of = as_naive_datetime(as_of)
    start = datetime.combine(start_date, time.min)
    end = datetime.combine(end_date, time.min)

    total_days = (end - start).total_seconds() / 86400
    if total_days <= 0:
        return 100.0 if as_of >= start else 0.0

    elapsed_days = (as_of - start).total_seconds() / 86400
    return max(0.0, min(100.0, elapsed_days / total_days * 100))


def health_status(progress: float, expected: float) -> HealthStatus:
    variance = progress - expected
    if progress >= 100:
        return HealthStatus.EXCEEDED
    if variance > -10:
        return HealthStatus.ON_TRACK
    if variance > -25:
        return HealthStatus.AT_RISK
    return HealthStatus.BEHIND


def trend(values: List[MonthlyValue]) -> Trend:
    """Direction of the two most recent values."""
    if len(values) < 2:
        return Trend.STABLE
    ordered = sorted(values, key=lambda v: (v.year, v.month))
    latest, previous = ordered[-1].value, ordered[-2].value
    if latest > previous:
        return Trend.IMPROVING
    if latest < previous:
        return Trend.DECLINING
    return Trend.STABLE


def _month_entry(value: MonthlyValue) -> dict:
    return {"month": MONTH_NAMES[value.month - 1], "value": value.value}


def enrich_objective(item: ObjectiveWithValues, as_of) -> EnrichedObjective:
    objective = item.objective
    computed = compute_progress(objective, item.values, as_of)
    expected = expected_progress(objective.start_date, objective.end_date, as_of)

    year = as_naive_datetime(as_of).year
    year_values = sorted((v for v in item.values if v.year == year), key=lambda v: v.month)

    return EnrichedObjective(
        objective=objective,
        computed=computed,
        expected_progress=expected,
        variance=computed.progress - expected,
        health_status=health_status(computed.progress, expected),
        trend=trend(item.values),
        last_update=_month_entry(year_values[-1]) if year_values else None,
        monthly_values=[_month_entry(v) for v in year_values],
    )


def _performer(item: EnrichedObjective) -> dict:
    return {"name": item.objective.display_name, "progress": item.progress}


def summarize(department: str, enriched: List[EnrichedObjective]) -> DepartmentSummary:
    total = len(enriched)
    average = sum(e.progress for e in enriched) / total if total else 0.0

    by_health = {status.value: 0 for status in HealthStatus}
    by_type = {objective_type.value: 0 for objective_type in ObjectiveType}
    for item in enriched:
        by_health[item.health_status.value] += 1
        by_type[item.objective.type.value] += 1

    top = max(enriched, key=lambda e: e.progress) if enriched else None
    worst = min(enriched, key=lambda e: e.progress) if enriched else None

    return DepartmentSummary(
        department_name=department,
        total_objectives=total,
        overall_progress_average=round(average, 2),
        by_health_status=by_health,
        count_by_type=by_type,
        top_performer=_performer(top) if top else None,
        worst_performer=_performer(worst) if worst else None,
    )


def enrich(department: str, objectives: List[ObjectiveWithValues], as_of) -> DepartmentAnalytics:
    """Enrich every objective of a department and fold them into a summary."""
    enriched = [enrich_objective(item, as_of) for item in objectives]
    return DepartmentAnalytics(summary=summarize(department, enriched), objectives=enriched)

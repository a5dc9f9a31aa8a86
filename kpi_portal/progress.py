"""
Objective progress calculation.

Given an objective, its monthly values and a reference instant, computes the
current value, progress percentage, expiry state and status label. Everything
here is pure: the reference instant is always passed in, never read from the
clock.

Aggregation by objective type:
- Cumulativo: sum of the year's values up to the reference month
- Mantenimento: mean of the year's values up to the reference month
- Ultimo mese: value of the latest recorded month of the year
"""
import math
from dataclasses import dataclass, field, asdict
from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional, Union

from kpi_portal.config import (
    DEPARTMENTS,
    NUMBER_FORMATS,
    ON_TRACK_THRESHOLD,
    REVERSE_OVERAGE_RATIO,
)


class ObjectiveType(str, Enum):
    CUMULATIVE = "Cumulativo"
    MAINTENANCE = "Mantenimento"
    LAST_MONTH = "Ultimo mese"


class ObjectiveStatus(str, Enum):
    COMPLETED = "Completed"
    NOT_ACHIEVED = "Not achieved"
    ACHIEVED = "Achieved"
    IN_PROGRESS = "In progress"
    BEHIND = "Behind"


class InvalidObjectiveError(ValueError):
    """Objective configuration cannot be used for calculation."""


@dataclass(frozen=True)
class MonthlyValue:
    month: int
    year: int
    value: float
    objective_id: Optional[int] = None


@dataclass(frozen=True)
class Objective:
    id: Optional[int]
    department: str
    type: ObjectiveType
    target: float
    reverse_logic: bool
    start_date: date
    end_date: date
    name: str = ""
    description: str = ""
    number_format: str = "number"
    order_index: int = 0

    @property
    def display_name(self) -> str:
        """Short name, falling back to a truncated description."""
        if self.name:
            return self.name
        if len(self.description) > 50:
            return self.description[:50] + "..."
        return self.description


@dataclass
class ObjectiveWithValues:
    objective: Objective
    values: List[MonthlyValue] = field(default_factory=list)


@dataclass(frozen=True)
class ComputedProgress:
    current_value: float
    progress: float
    status: ObjectiveStatus
    is_on_track: bool
    is_expired: bool
    days_until_expiry: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


# ── Row parsing ──────────────────────────────────────────────────────

def _parse_date(value, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise InvalidObjectiveError(f"Invalid {field_name}: {value!r}")


def parse_objective_type(value) -> ObjectiveType:
    try:
        return ObjectiveType(value)
    except ValueError:
        raise InvalidObjectiveError(f"Invalid objective type: {value!r}")


def objective_from_row(row) -> Objective:
    """
    Build an Objective from a database row or payload dict.
    Raises InvalidObjectiveError on unknown department/type or bad dates.
    """
    department = row["department"]
    if department not in DEPARTMENTS:
        raise InvalidObjectiveError(f"Invalid department: {department!r}")

    start_date = _parse_date(row["start_date"], "start_date")
    end_date = _parse_date(row["end_date"], "end_date")
    if start_date > end_date:
        raise InvalidObjectiveError(
            f"start_date {start_date.isoformat()} is after end_date {end_date.isoformat()}"
        )

    number_format = row["number_format"] or "number"
    if number_format not in NUMBER_FORMATS:
        raise InvalidObjectiveError(f"Invalid number format: {number_format!r}")

    try:
        target = float(row["target_numeric"])
    except (TypeError, ValueError):
        raise InvalidObjectiveError(f"Invalid target: {row['target_numeric']!r}")

    return Objective(
        id=row["id"],
        department=department,
        type=parse_objective_type(row["type_objective"]),
        target=target,
        reverse_logic=bool(row["reverse_logic"]),
        start_date=start_date,
        end_date=end_date,
        name=row["objective_name"] or "",
        description=row["objective_smart"] or "",
        number_format=number_format,
        order_index=row["order_index"] or 0,
    )


def value_from_row(row) -> MonthlyValue:
    return MonthlyValue(
        month=int(row["month"]),
        year=int(row["year"]),
        value=float(row["value"]),
        objective_id=row["objective_id"],
    )


# ── Calculation ──────────────────────────────────────────────────────

def as_naive_datetime(as_of: Union[date, datetime]) -> datetime:
    """Reference instant as a naive local datetime; aware instants are converted."""
    if isinstance(as_of, datetime):
        if as_of.tzinfo is not None:
            return as_of.astimezone().replace(tzinfo=None)
        return as_of
    return datetime.combine(as_of, time.min)


def aggregate_values(objective_type: ObjectiveType, values: List[MonthlyValue]) -> float:
    """Apply the type's aggregation rule to an already-selected set of rows."""
    if not values:
        return 0.0
    if objective_type == ObjectiveType.CUMULATIVE:
        return sum(v.value for v in values)
    if objective_type == ObjectiveType.MAINTENANCE:
        return sum(v.value for v in values) / len(values)
    if objective_type == ObjectiveType.LAST_MONTH:
        return max(values, key=lambda v: v.month).value
    raise InvalidObjectiveError(f"Invalid objective type: {objective_type!r}")


def current_value(objective: Objective, values: List[MonthlyValue], as_of) -> float:
    """Year-to-date value of the objective as of the reference instant."""
    as_of = as_naive_datetime(as_of)
    year_values = [v for v in values if v.year == as_of.year]

    # Latest month counts even past the reference month
    if objective.type != ObjectiveType.LAST_MONTH:
        year_values = [v for v in year_values if v.month <= as_of.month]

    return aggregate_values(objective.type, year_values)


def progress_percent(current: float, target: float, reverse_logic: bool) -> float:
    """
    Progress towards target, 0..100.

    Normal logic is the capped ratio current/target. Reverse logic is 100 at or
    below target and falls linearly to 0 at 50% of |target| above it.
    """
    if reverse_logic:
        if current <= target:
            return 100.0
        overage = current - target
        max_reasonable_overage = abs(target) * REVERSE_OVERAGE_RATIO
        if max_reasonable_overage == 0:
            return 0.0
        return max(0.0, 100 - (overage / max_reasonable_overage * 100))

    if target == 0:
        return 100.0 if current > 0 else 0.0
    return min(100.0, current / target * 100)


def is_on_track(progress: float) -> bool:
    return progress >= ON_TRACK_THRESHOLD


def expiry(end_date: date, as_of) -> tuple:
    """Return (is_expired, days_until_expiry); days go negative once expired."""
    as_of = as_naive_datetime(as_of)
    end = datetime.combine(end_date, time.min)
    is_expired = end < as_of
    days_until_expiry = math.ceil((end - as_of).total_seconds() / 86400)
    return is_expired, days_until_expiry


def resolve_status(is_expired: bool, progress: float) -> ObjectiveStatus:
    if is_expired:
        if progress >= 100:
            return ObjectiveStatus.COMPLETED
        return ObjectiveStatus.NOT_ACHIEVED
    if progress >= 100:
        return ObjectiveStatus.ACHIEVED
    if is_on_track(progress):
        return ObjectiveStatus.IN_PROGRESS
    return ObjectiveStatus.BEHIND


def build_progress(current: float, progress: float, end_date: date, as_of) -> ComputedProgress:
    """Assemble a result from an already-computed value and progress."""
    is_expired, days_until_expiry = expiry(end_date, as_of)
    return ComputedProgress(
        current_value=round(current, 2),
        progress=round(progress, 2),
        status=resolve_status(is_expired, progress),
        is_on_track=is_on_track(progress),
        is_expired=is_expired,
        days_until_expiry=days_until_expiry,
    )


def compute_progress(objective: Objective, values: List[MonthlyValue], as_of) -> ComputedProgress:
    """Compute value, progress, expiry and status of an objective at as_of."""
    current = current_value(objective, values, as_of)
    progress = progress_percent(current, objective.target, objective.reverse_logic)
    return build_progress(current, progress, objective.end_date, as_of)

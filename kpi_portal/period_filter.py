"""
Calendar period scoping of objective values.

A period is an inclusive month range within one year. When start_month is
greater than end_month the range wraps (Nov-Feb keeps months 11, 12, 1, 2 of
the same year).
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List

from kpi_portal.config import MONTH_NAMES, VALUE_YEAR_MAX, VALUE_YEAR_MIN
from kpi_portal.progress import (
    ComputedProgress,
    MonthlyValue,
    Objective,
    ObjectiveWithValues,
    aggregate_values,
    as_naive_datetime,
    build_progress,
    progress_percent,
)


@dataclass(frozen=True)
class Period:
    start_month: int
    end_month: int
    year: int

    def __post_init__(self):
        for name in ("start_month", "end_month"):
            month = getattr(self, name)
            if not 1 <= month <= 12:
                raise ValueError(f"{name} must be between 1 and 12, got {month}")
        if not VALUE_YEAR_MIN <= self.year <= VALUE_YEAR_MAX:
            raise ValueError(f"year must be between {VALUE_YEAR_MIN} and {VALUE_YEAR_MAX}, got {self.year}")

    @classmethod
    def full_year(cls, year: int) -> "Period":
        return cls(1, 12, year)

    @property
    def wraps(self) -> bool:
        return self.start_month > self.end_month

    def contains(self, month: int, year: int) -> bool:
        if year != self.year:
            return False
        if self.wraps:
            return month >= self.start_month or month <= self.end_month
        return self.start_month <= month <= self.end_month


def filter_by_period(values: List[MonthlyValue], period: Period) -> List[MonthlyValue]:
    return [v for v in values if period.contains(v.month, v.year)]


def filter_objectives_by_period(objectives: List[ObjectiveWithValues], period: Period) -> List[ObjectiveWithValues]:
    """Copy of each objective with its values restricted to the period."""
    return [
        ObjectiveWithValues(item.objective, filter_by_period(item.values, period))
        for item in objectives
    ]


def current_value_for_period(objective: Objective, values: List[MonthlyValue], period: Period) -> float:
    """Aggregate every value in the period; no reference-month cutoff applies."""
    return aggregate_values(objective.type, filter_by_period(values, period))


def reverse_progress_for_period(current: float, target: float) -> float:
    """Linear reverse-logic progress used for period views."""
    if target == 0:
        return 0.0
    return max(0.0, (target - current) / target * 100)


def progress_for_period(objective: Objective, values: List[MonthlyValue], period: Period) -> float:
    current = current_value_for_period(objective, values, period)
    if objective.reverse_logic:
        return reverse_progress_for_period(current, objective.target)
    return progress_percent(current, objective.target, reverse_logic=False)


def compute_progress_for_period(objective: Objective, values: List[MonthlyValue], period: Period, as_of) -> ComputedProgress:
    """Period-scoped counterpart of progress.compute_progress."""
    current = current_value_for_period(objective, values, period)
    progress = progress_for_period(objective, values, period)
    return build_progress(current, progress, objective.end_date, as_of)


def time_elapsed_for_period(objective: Objective, period: Period, as_of) -> float:
    """
    Share (0..100) of the overlap between the objective window and the period
    that has elapsed at as_of.
    A wrapping period (e.g. Nov-Feb) spans an empty Nov 1 - Feb 28 window of
    the same year, so it always reports 100.
    """
    as_of = as_naive_datetime(as_of)

    period_start = date(period.year, period.start_month, 1)
    last_day = calendar.monthrange(period.year, period.end_month)[1]
    period_end = date(period.year, period.end_month, last_day)

    effective_start = datetime.combine(max(objective.start_date, period_start), time.min)
    effective_end = datetime.combine(min(objective.end_date, period_end), time.min)
    effective_now = min(as_of, effective_end)

    total_days = (effective_end - effective_start).total_seconds() / 86400
    if total_days <= 0:
        return 100.0

    elapsed_days = (effective_now - effective_start).total_seconds() / 86400
    return max(0.0, min(100.0, elapsed_days / total_days * 100))


def period_label(period: Period) -> str:
    if period.start_month == period.end_month:
        return f"{MONTH_NAMES[period.start_month - 1]} {period.year}"
    if period.start_month == 1 and period.end_month == 12:
        return f"Anno {period.year}"
    start = MONTH_NAMES[period.start_month - 1]
    end = MONTH_NAMES[period.end_month - 1]
    return f"{start} - {end} {period.year}"

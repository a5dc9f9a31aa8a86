"""
Common dependencies for route handlers.
"""
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, Query

from kpi_portal.config import DEPARTMENTS
from kpi_portal.period_filter import Period
from kpi_portal.progress import as_naive_datetime


def get_as_of(as_of: Optional[datetime] = Query(None)) -> datetime:
    """
    Reference instant for progress calculations.
    Defaults to now; tests and reports pass an explicit as_of.
    Instants with an offset are converted to naive local time.
    """
    if as_of is None:
        return datetime.now()
    return as_naive_datetime(as_of)


def valid_department(department: str) -> str:
    """Path dependency rejecting unknown departments."""
    if department not in DEPARTMENTS:
        raise HTTPException(status_code=400, detail="Invalid department")
    return department


def get_period(
    start_month: Optional[int] = Query(None),
    end_month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
) -> Optional[Period]:
    """Optional calendar period; all three parameters or none."""
    supplied = [p for p in (start_month, end_month, year) if p is not None]
    if not supplied:
        return None
    if len(supplied) != 3:
        raise HTTPException(status_code=400, detail="start_month, end_month and year must be given together")
    try:
        return Period(start_month, end_month, year)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

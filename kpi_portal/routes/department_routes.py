"""
Department routes: objective listing with computed progress, analytics, and
the server-rendered scorecard page.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

from kpi_portal.analytics import enrich
from kpi_portal.config import DEPARTMENTS
from kpi_portal.database import (
    get_db,
    get_objectives_by_department,
    load_department_objectives,
    to_objectives_with_values,
)
from kpi_portal.dependencies import get_as_of, get_period, valid_department
from kpi_portal.period_filter import (
    Period,
    compute_progress_for_period,
    filter_by_period,
    period_label,
    time_elapsed_for_period,
)
from kpi_portal.progress import (
    InvalidObjectiveError,
    compute_progress,
    objective_from_row,
    value_from_row,
)
from kpi_portal.templates_config import templates

router = APIRouter()


def build_department_view(rows, as_of: datetime, period: Optional[Period] = None):
    """
    Attach computed progress to each objective row.
    With a period, values are restricted to it and progress is period-scoped.
    """
    result = []
    for row in rows:
        objective = objective_from_row(row)
        values = [value_from_row(v) for v in row["values"]]
        item = dict(row)

        if period is None:
            computed = compute_progress(objective, values, as_of)
        else:
            computed = compute_progress_for_period(objective, values, period, as_of)
            in_period = set((v.month, v.year) for v in filter_by_period(values, period))
            item["values"] = [v for v in row["values"] if (v["month"], v["year"]) in in_period]
            item["time_elapsed"] = round(time_elapsed_for_period(objective, period, as_of), 2)

        item["progress"] = computed.to_dict()
        result.append(item)
    return result


@router.get("/api/departments", response_class=JSONResponse)
async def list_departments():
    return JSONResponse({"departments": DEPARTMENTS})


@router.get("/api/departments/{department}/objectives", response_class=JSONResponse)
async def department_objectives(
    department: str = Depends(valid_department),
    period: Optional[Period] = Depends(get_period),
    as_of: datetime = Depends(get_as_of),
):
    """Objectives of a department with values and computed progress."""
    with get_db() as conn:
        rows = get_objectives_by_department(conn, department)

    try:
        objectives = build_department_view(rows, as_of, period)
    except InvalidObjectiveError as e:
        return JSONResponse({"error": str(e)}, status_code=422)

    return JSONResponse({
        "department": department,
        "as_of": as_of.isoformat(),
        "period": None if period is None else {
            "start_month": period.start_month,
            "end_month": period.end_month,
            "year": period.year,
            "label": period_label(period),
        },
        "objectives": objectives,
    })


@router.get("/api/departments/{department}/analytics", response_class=JSONResponse)
async def department_analytics(
    department: str = Depends(valid_department),
    as_of: datetime = Depends(get_as_of),
):
    """Enriched objectives and department summary."""
    try:
        with get_db() as conn:
            objectives = load_department_objectives(conn, department)
    except InvalidObjectiveError as e:
        return JSONResponse({"error": str(e)}, status_code=422)

    return JSONResponse(enrich(department, objectives, as_of).to_dict())


@router.get("/departments/{department}", response_class=HTMLResponse)
async def department_page(
    request: Request,
    department: str = Depends(valid_department),
    period: Optional[Period] = Depends(get_period),
    as_of: datetime = Depends(get_as_of),
):
    """Scorecard page of a department."""
    with get_db() as conn:
        rows = get_objectives_by_department(conn, department)

    analytics = enrich(department, to_objectives_with_values(rows), as_of)
    return templates.TemplateResponse(
        request,
        "department.html",
        {
            "department": department,
            "departments": DEPARTMENTS,
            "objectives": build_department_view(rows, as_of, period),
            "summary": analytics.summary.to_dict(),
            "period_label": period_label(period) if period else None,
            "as_of": as_of,
        },
    )

"""
Objective routes: create, update, delete, reorder and monthly value entry.
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from kpi_portal.app_logger import get_logger
from kpi_portal.config import (
    DEPARTMENTS,
    NUMBER_FORMATS,
    OBJECTIVE_TYPES,
    VALUE_YEAR_MAX,
    VALUE_YEAR_MIN,
)
from kpi_portal.database import (
    create_objective,
    delete_objective,
    delete_objective_value,
    delete_objectives,
    get_db,
    get_objective,
    get_objective_values,
    reorder_objectives,
    update_objective,
    upsert_objective_value,
)
from kpi_portal.dependencies import get_as_of
from kpi_portal.formatters import parse_formatted_number
from kpi_portal.progress import InvalidObjectiveError, compute_progress, objective_from_row, value_from_row
from kpi_portal.schemas import (
    BulkDelete,
    BulkObjectiveCreate,
    BulkValueUpdate,
    ObjectiveCreate,
    ObjectiveUpdate,
    ReorderRequest,
    ValueUpdate,
)

router = APIRouter()
logger = get_logger(__name__)


def validate_objective_fields(department=None, type_objective=None, number_format=None,
                              start_date=None, end_date=None):
    """Return an error message for invalid objective fields, or None."""
    if department is not None and department not in DEPARTMENTS:
        return "Invalid department"
    if type_objective is not None and type_objective not in OBJECTIVE_TYPES:
        return "Invalid objective type"
    if number_format is not None and number_format not in NUMBER_FORMATS:
        return "Invalid number format"
    if start_date is not None and end_date is not None and start_date > end_date:
        return "start_date must not be after end_date"
    return None


def validate_month_year(month: int, year: int):
    if month < 1 or month > 12:
        return "Month must be between 1 and 12"
    if year < VALUE_YEAR_MIN or year > VALUE_YEAR_MAX:
        return f"Year must be between {VALUE_YEAR_MIN} and {VALUE_YEAR_MAX}"
    return None


def _objective_error(body: ObjectiveCreate):
    return validate_objective_fields(
        department=body.department,
        type_objective=body.type_objective,
        number_format=body.number_format,
        start_date=body.start_date,
        end_date=body.end_date,
    )


@router.post("", response_class=JSONResponse)
async def create_objective_route(body: ObjectiveCreate):
    """Create a single objective."""
    error = _objective_error(body)
    if error:
        return JSONResponse({"error": error}, status_code=400)

    with get_db() as conn:
        objective_id = create_objective(conn, body.model_dump())

    return JSONResponse(
        {"id": objective_id, "message": "Objective created successfully"},
        status_code=201,
    )


@router.post("/bulk", response_class=JSONResponse)
async def bulk_create_objectives(body: BulkObjectiveCreate):
    """Create several objectives in one transaction; nothing is created if any row is invalid."""
    for index, item in enumerate(body.objectives):
        error = _objective_error(item)
        if error:
            return JSONResponse({"error": f"Row {index + 1}: {error}"}, status_code=400)

    with get_db() as conn:
        ids = [create_objective(conn, item.model_dump()) for item in body.objectives]

    return JSONResponse(
        {"ids": ids, "message": f"{len(ids)} objectives created successfully"},
        status_code=201,
    )


@router.delete("/bulk-delete", response_class=JSONResponse)
async def bulk_delete_objectives(body: BulkDelete):
    if not body.objective_ids:
        return JSONResponse(
            {"error": "objective_ids array is required and cannot be empty"},
            status_code=400,
        )
    if not all(objective_id > 0 for objective_id in body.objective_ids):
        return JSONResponse(
            {"error": "All objective IDs must be valid positive numbers"},
            status_code=400,
        )

    with get_db() as conn:
        deleted = delete_objectives(conn, body.objective_ids)

    return JSONResponse({
        "message": f"{deleted} objectives deleted successfully",
        "deleted_count": deleted,
    })


@router.post("/reorder", response_class=JSONResponse)
async def reorder_objectives_route(body: ReorderRequest):
    """Persist drag-and-drop order of a department's scorecards."""
    if body.department not in DEPARTMENTS:
        return JSONResponse({"error": "Invalid department"}, status_code=400)

    with get_db() as conn:
        reorder_objectives(conn, body.department, body.ordered_ids)

    return JSONResponse({"message": "Objectives reordered successfully"})


@router.get("/{objective_id:int}", response_class=JSONResponse)
async def get_objective_route(objective_id: int, as_of: datetime = Depends(get_as_of)):
    """Objective with its values and computed progress."""
    with get_db() as conn:
        objective = get_objective(conn, objective_id)
        if not objective:
            return JSONResponse({"error": "Objective not found"}, status_code=404)
        values = get_objective_values(conn, objective_id)

    try:
        computed = compute_progress(
            objective_from_row(objective),
            [value_from_row(v) for v in values],
            as_of,
        )
    except InvalidObjectiveError as e:
        return JSONResponse({"error": str(e)}, status_code=422)

    objective["values"] = values
    objective["progress"] = computed.to_dict()
    return JSONResponse(objective)


@router.put("/{objective_id:int}", response_class=JSONResponse)
async def update_objective_route(objective_id: int, body: ObjectiveUpdate):
    updates = body.model_dump(exclude_none=True)
    error = validate_objective_fields(
        type_objective=updates.get("type_objective"),
        number_format=updates.get("number_format"),
    )
    if error:
        return JSONResponse({"error": error}, status_code=400)
    if not updates:
        return JSONResponse({"error": "No fields to update"}, status_code=400)

    with get_db() as conn:
        current = get_objective(conn, objective_id)
        if not current:
            return JSONResponse({"error": "Objective not found"}, status_code=404)

        # The window must stay valid after a partial date change
        start_date = str(updates.get("start_date", current["start_date"]))[:10]
        end_date = str(updates.get("end_date", current["end_date"]))[:10]
        if start_date > end_date:
            return JSONResponse({"error": "start_date must not be after end_date"}, status_code=400)

        update_objective(conn, objective_id, updates)

    return JSONResponse({"message": "Objective updated successfully"})


@router.delete("/{objective_id:int}", response_class=JSONResponse)
async def delete_objective_route(objective_id: int):
    with get_db() as conn:
        deleted = delete_objective(conn, objective_id)

    if deleted == 0:
        return JSONResponse({"error": "Objective not found"}, status_code=404)
    return JSONResponse({"message": "Objective deleted successfully"})


# ── Monthly values ───────────────────────────────────────────────────

@router.get("/{objective_id:int}/values", response_class=JSONResponse)
async def get_values_route(objective_id: int):
    with get_db() as conn:
        if not get_objective(conn, objective_id):
            return JSONResponse({"error": "Objective not found"}, status_code=404)
        values = get_objective_values(conn, objective_id)
    return JSONResponse(values)


def _parsed_value(item: ValueUpdate, number_format: str) -> float:
    if isinstance(item.value, str):
        return parse_formatted_number(item.value, number_format)
    return item.value


@router.put("/{objective_id:int}/values", response_class=JSONResponse)
async def upsert_value_route(objective_id: int, body: ValueUpdate):
    """Record (or overwrite) the value of one month."""
    error = validate_month_year(body.month, body.year)
    if error:
        return JSONResponse({"error": error}, status_code=400)

    with get_db() as conn:
        objective = get_objective(conn, objective_id)
        if not objective:
            return JSONResponse({"error": "Objective not found"}, status_code=404)
        upsert_objective_value(
            conn, objective_id, body.month, body.year,
            _parsed_value(body, objective["number_format"]),
        )

    return JSONResponse({"message": "Objective value updated successfully"})


@router.put("/{objective_id:int}/values/bulk", response_class=JSONResponse)
async def bulk_upsert_values_route(objective_id: int, body: BulkValueUpdate):
    """Record several months at once (pasted spreadsheet cells)."""
    for item in body.values:
        error = validate_month_year(item.month, item.year)
        if error:
            return JSONResponse({"error": f"{item.month}/{item.year}: {error}"}, status_code=400)

    with get_db() as conn:
        objective = get_objective(conn, objective_id)
        if not objective:
            return JSONResponse({"error": "Objective not found"}, status_code=404)
        for item in body.values:
            upsert_objective_value(
                conn, objective_id, item.month, item.year,
                _parsed_value(item, objective["number_format"]),
            )

    return JSONResponse({
        "message": f"{len(body.values)} values updated successfully",
        "updated_count": len(body.values),
    })


@router.delete("/{objective_id:int}/values/{year:int}/{month:int}", response_class=JSONResponse)
async def delete_value_route(objective_id: int, year: int, month: int):
    with get_db() as conn:
        deleted = delete_objective_value(conn, objective_id, month, year)

    if deleted == 0:
        return JSONResponse({"error": "Value not found"}, status_code=404)
    return JSONResponse({"message": "Objective value deleted successfully"})

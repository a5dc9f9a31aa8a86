"""
Sample data routes (development and demos).
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from kpi_portal.database import get_db
from kpi_portal.dependencies import get_as_of
from kpi_portal.seed import seed_expiry_scenarios, seed_sample_data

router = APIRouter()


@router.post("", response_class=JSONResponse)
async def seed_route(as_of: datetime = Depends(get_as_of)):
    """Replace all objectives with the sample set."""
    with get_db() as conn:
        count = seed_sample_data(conn, as_of.date())
    return JSONResponse({"message": "Database seeded successfully", "objectives": count})


@router.post("/expired", response_class=JSONResponse)
async def seed_expired_route(as_of: datetime = Depends(get_as_of)):
    """Add objectives that are expired or about to expire."""
    with get_db() as conn:
        ids = seed_expiry_scenarios(conn, as_of.date())
    return JSONResponse({
        "message": f"Created {len(ids)} test objectives with expiration scenarios",
        "objective_ids": ids,
    })

"""
Main FastAPI application entry point.
KPI Portal - departmental objective tracking
"""
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kpi_portal.app_logger import get_logger, setup_logging
from kpi_portal.config import DEPARTMENTS
from kpi_portal.database import get_db, init_database
from kpi_portal.progress import InvalidObjectiveError
from kpi_portal.templates_config import templates
from kpi_portal.routes import chat_routes, department_routes, objective_routes, seed_routes

setup_logging()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="KPI Portal",
    description="Departmental objectives, monthly values and progress tracking",
    version="1.0.0"
)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    with get_db() as conn:
        init_database(conn)
    logger.info("KPI Portal started")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("KPI Portal stopped")


# Root redirect
@app.get("/")
async def root():
    return RedirectResponse(url=f"/departments/{quote(DEPARTMENTS[0])}", status_code=302)


# Include route modules
app.include_router(department_routes.router, tags=["Departments"])
app.include_router(objective_routes.router, prefix="/api/objectives", tags=["Objectives"])
app.include_router(chat_routes.router, tags=["Chat"])
app.include_router(seed_routes.router, prefix="/api/seed", tags=["Sample Data"])


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def _error_response(request: Request, status_code: int, message: str):
    if _is_api(request):
        return JSONResponse({"error": message}, status_code=status_code)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"error_code": status_code, "error_message": message, "departments": DEPARTMENTS, "department": None},
        status_code=status_code,
    )


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if exc.status_code != 404 or _is_api(request) else "Page not found"
    return _error_response(request, exc.status_code, str(message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Missing or invalid field: {field}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return _error_response(request, 400, message)


@app.exception_handler(InvalidObjectiveError)
async def invalid_objective_handler(request: Request, exc: InvalidObjectiveError):
    logger.error("Invalid stored objective: %s", exc)
    return _error_response(request, 422, str(exc))


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(request, 500, "Internal server error")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("kpi_portal.main:app", host="127.0.0.1", port=8000, reload=True)

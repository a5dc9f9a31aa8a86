"""
Chat assistant route: streams answers about a department's objectives.
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from kpi_portal import chat
from kpi_portal.analytics import enrich
from kpi_portal.app_logger import get_logger
from kpi_portal.config import DEPARTMENTS
from kpi_portal.database import get_db, load_department_objectives
from kpi_portal.dependencies import get_as_of
from kpi_portal.schemas import ChatRequest

router = APIRouter()
logger = get_logger(__name__)


@router.post("/api/chat")
def chat_route(body: ChatRequest, as_of: datetime = Depends(get_as_of)):
    if not body.messages:
        return JSONResponse({"error": "Messages array is required"}, status_code=400)

    analytics = None
    if body.department is not None:
        if body.department not in DEPARTMENTS:
            return JSONResponse({"error": "Invalid department"}, status_code=400)
        with get_db() as conn:
            objectives = load_department_objectives(conn, body.department)
        analytics = enrich(body.department, objectives, as_of).to_dict()

    messages = chat.build_messages([m.model_dump() for m in body.messages], analytics)

    try:
        upstream = chat.open_stream(messages, body.temperature, body.max_tokens)
    except chat.ChatConfigurationError as e:
        logger.warning("Chat unavailable: %s", e)
        return JSONResponse({"error": "Chat assistant is not configured"}, status_code=503)
    except chat.ChatUpstreamError as e:
        logger.error("Chat request failed: %s", e)
        return JSONResponse({"error": "Chat service error"}, status_code=502)

    return StreamingResponse(chat.iter_content(upstream), media_type="text/plain; charset=utf-8")

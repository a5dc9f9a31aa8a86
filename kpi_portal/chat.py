"""
Chat assistant over department analytics.

The department's enriched objectives are embedded as JSON in the system prompt
and the conversation is forwarded to an OpenAI-compatible chat completions
endpoint. Answers are streamed back as plain text.
"""
import json
from typing import Iterator, List, Optional

import requests

from kpi_portal import config
from kpi_portal.app_logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are an analyst for a departmental KPI dashboard.
Answer only from the JSON data provided below; do not guess or give outside advice.

How the data is computed:
- type_objective "Cumulativo": current_value is the sum of the year's monthly values.
- type_objective "Mantenimento": current_value is the average of the monthly values.
- type_objective "Ultimo mese": current_value is the latest month's value.
- reverse_logic false: progress = current_value / target_numeric * 100, capped at 100.
- reverse_logic true: lower is better; progress is 100 when current_value <= target_numeric.
- status: expired and progress >= 100 -> Completed; expired otherwise -> Not achieved;
  progress >= 100 -> Achieved; progress >= 70 -> In progress; otherwise Behind.
- health_status compares progress with expected_progress (time elapsed in the objective window).

Answer format:
- Short, schematic answers; use tables when comparing several objectives.
- Bold section headers.
- Never show numeric ids or internal reasoning."""


class ChatError(Exception):
    """Base class for chat assistant failures."""


class ChatConfigurationError(ChatError):
    """Chat is not configured (no API key)."""


class ChatUpstreamError(ChatError):
    """The completion endpoint failed or could not be reached."""


def build_messages(messages: List[dict], analytics: Optional[dict] = None) -> List[dict]:
    """Prepend the system prompt, with analytics data when available."""
    system = SYSTEM_PROMPT
    if analytics is not None:
        system += "\n\nOBJECTIVE DATA:\n" + json.dumps(analytics, indent=2, ensure_ascii=False)
    conversation = [m for m in messages if m.get("role") != "system"]
    return [{"role": "system", "content": system}] + conversation


def open_stream(messages: List[dict], temperature: float = None, max_tokens: int = None,
                session=None) -> requests.Response:
    """
    Start a streaming completion and return the open response.
    Raises ChatConfigurationError or ChatUpstreamError before any byte is streamed.
    """
    if not config.CHAT_API_KEY:
        raise ChatConfigurationError("CHAT_API_KEY is not set")

    payload = {
        "model": config.CHAT_MODEL,
        "messages": messages,
        "temperature": config.CHAT_TEMPERATURE if temperature is None else temperature,
        "max_tokens": config.CHAT_MAX_TOKENS if max_tokens is None else max_tokens,
        "stream": True,
    }
    headers = {
        "Authorization": f"Bearer {config.CHAT_API_KEY}",
        "Content-Type": "application/json",
    }

    http = session or requests
    try:
        response = http.post(
            config.CHAT_API_URL,
            json=payload,
            headers=headers,
            stream=True,
            timeout=config.CHAT_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise ChatUpstreamError(f"Chat endpoint unreachable: {e}") from e

    if not response.ok:
        response.close()
        raise ChatUpstreamError(f"Chat endpoint error: {response.status_code}")
    return response


def iter_content(response) -> Iterator[str]:
    """Yield text deltas from a server-sent-events completion stream."""
    try:
        for line in response.iter_lines(decode_unicode=True):
            if not line or not line.startswith("data:"):
                continue
            data = line[len("data:"):].strip()
            if data == "[DONE]":
                break
            try:
                chunk = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed stream chunk: %r", data[:100])
                continue
            choices = chunk.get("choices") or []
            if not choices:
                continue
            content = (choices[0].get("delta") or {}).get("content")
            if content:
                yield content
    finally:
        response.close()

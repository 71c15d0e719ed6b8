"""Notebook analysis service: send a notebook's notes and a question to a local LLM (Ollama)."""

import logging
import time
from typing import TYPE_CHECKING

import httpx

from tracky.models import Note
from tracky.schemas.analysis import ChatMessage

if TYPE_CHECKING:
    from tracky.core.config import Settings

logger = logging.getLogger(__name__)

EMPTY_NOTEBOOK_ANSWER = "There are no notes in this notebook to analyze."


class AnalysisServiceError(Exception):
    """Raised when the analysis service cannot complete (Ollama unreachable, timeout, or bad response)."""

    def __init__(self, message: str, cause: Exception | None = None, upstream: bool = False) -> None:
        self.message = message
        self.cause = cause
        # True when Ollama answered but the answer was unusable (maps to 502 instead of 503)
        self.upstream = upstream
        super().__init__(message)


def _build_system_prompt(notes: list[Note]) -> str:
    """System instruction carrying every note with its timestamp."""
    parts = [
        "You are a helpful assistant analyzing a user's personal notes. ",
        "Here are the notes from their notebook:\n\n",
    ]
    for note in notes:
        timestamp = note.created_at.strftime("%a, %d %b %Y %H:%M:%S") if note.created_at else "unknown time"
        parts.append(f"--- Note from {timestamp} ---\n{note.content}\n\n")
    return "".join(parts)


def build_messages(
    notes: list[Note],
    question: str,
    history: list[ChatMessage],
) -> list[dict[str, str]]:
    """Ollama chat messages: system prompt, prior turns, then the new question."""
    messages = [{"role": "system", "content": _build_system_prompt(notes)}]
    for msg in history:
        # The browser client labels LLM turns "model"; Ollama calls them "assistant"
        role = "assistant" if msg.role in ("model", "assistant") else "user"
        messages.append({"role": role, "content": msg.content})
    messages.append({"role": "user", "content": question})
    return messages


async def analyze_notes(
    notes: list[Note],
    question: str,
    history: list[ChatMessage],
    settings: "Settings",
) -> str:
    """
    Ask the LLM about the given notes and return its answer text.

    Raises AnalysisServiceError on connection failure, timeout, or an unusable response.
    """
    if not notes:
        return EMPTY_NOTEBOOK_ANSWER

    url = f"{settings.OLLAMA_BASE_URL.rstrip('/')}/api/chat"
    payload = {
        "model": settings.OLLAMA_MODEL,
        "messages": build_messages(notes, question, history),
        "stream": False,
        "options": {"temperature": settings.OLLAMA_TEMPERATURE},
    }
    timeout = httpx.Timeout(settings.OLLAMA_REQUEST_TIMEOUT_SEC)
    log_extra: dict[str, float | int | str] = {
        "note_count": len(notes),
        "history_length": len(history),
        "model": settings.OLLAMA_MODEL,
    }
    start = time.perf_counter()

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=payload)
    except httpx.ConnectError as e:
        logger.info(
            "LLM analysis request failed",
            extra={**log_extra, "llm_latency_seconds": time.perf_counter() - start, "status": "error"},
        )
        raise AnalysisServiceError(
            "Ollama is unreachable. Ensure Ollama is running and OLLAMA_BASE_URL is correct.",
            cause=e,
        ) from e
    except httpx.TimeoutException as e:
        logger.info(
            "LLM analysis request failed",
            extra={**log_extra, "llm_latency_seconds": time.perf_counter() - start, "status": "error"},
        )
        raise AnalysisServiceError(
            "Ollama request timed out. Try increasing OLLAMA_REQUEST_TIMEOUT_SEC.",
            cause=e,
        ) from e
    except httpx.HTTPError as e:
        logger.info(
            "LLM analysis request failed",
            extra={**log_extra, "llm_latency_seconds": time.perf_counter() - start, "status": "error"},
        )
        raise AnalysisServiceError("Ollama request failed.", cause=e) from e

    log_extra["llm_latency_seconds"] = time.perf_counter() - start

    if response.status_code != 200:
        raise AnalysisServiceError(
            f"Ollama returned status {response.status_code}. Check that the model is pulled "
            f"(e.g. ollama pull {settings.OLLAMA_MODEL}).",
            upstream=True,
        )

    try:
        body = response.json()
    except ValueError as e:
        raise AnalysisServiceError(
            "Ollama response body is not valid JSON.", cause=e, upstream=True
        ) from e

    message = body.get("message") if isinstance(body, dict) else None
    answer = message.get("content") if isinstance(message, dict) else None
    if not isinstance(answer, str) or not answer.strip():
        raise AnalysisServiceError("Empty response from Ollama.", upstream=True)

    logger.info("LLM analysis request completed", extra=log_extra)
    return answer.strip()

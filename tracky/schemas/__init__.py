"""Pydantic request/response schemas."""

from tracky.schemas.analysis import AnalysisRequest, AnalysisResponse, ChatMessage
from tracky.schemas.auth import Credentials, CurrentUser, MessageResponse
from tracky.schemas.health import HealthResponse
from tracky.schemas.note import (
    ImageUploadResponse,
    NoteCreateRequest,
    NoteImageResponse,
    NoteResponse,
    NoteUpdateRequest,
)
from tracky.schemas.notebook import (
    NotebookCreateRequest,
    NotebookResponse,
    NotebookUpdateRequest,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "ChatMessage",
    "Credentials",
    "CurrentUser",
    "HealthResponse",
    "ImageUploadResponse",
    "MessageResponse",
    "NoteCreateRequest",
    "NoteImageResponse",
    "NoteResponse",
    "NoteUpdateRequest",
    "NotebookCreateRequest",
    "NotebookResponse",
    "NotebookUpdateRequest",
]

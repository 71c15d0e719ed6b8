"""Request/response schemas for notes and their images."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NoteImageResponse(BaseModel):
    """Image attached to a note; fetch the file from /uploads/{id}."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    note_id: int
    filename: str
    created_at: datetime


class NoteCreateRequest(BaseModel):
    content: str = Field(..., description="Note text")


class NoteUpdateRequest(BaseModel):
    content: str = Field(..., description="Replacement note text")


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    notebook_id: int
    content: str
    created_at: datetime
    images: list[NoteImageResponse] = Field(default_factory=list)


class ImageUploadResponse(BaseModel):
    id: int
    filename: str

"""Request/response schemas for notebook endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotebookCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Notebook name")


class NotebookUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="New notebook name")


class NotebookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    created_at: datetime

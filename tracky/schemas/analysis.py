"""Pydantic schemas for the notebook analysis endpoint."""

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One prior turn of the analysis conversation."""

    role: str = Field(..., description="'user' or 'model' (the LLM)")
    content: str = Field(..., description="Message text")


class AnalysisRequest(BaseModel):
    """Request body for POST /analysis."""

    notebook_id: int = Field(..., description="Notebook whose notes are analyzed")
    question: str = Field(..., min_length=1, description="Question about the notes")
    history: list[ChatMessage] = Field(
        default_factory=list,
        max_length=100,
        description="Previous turns of this conversation, oldest first.",
    )


class AnalysisResponse(BaseModel):
    answer: str = Field(..., description="LLM answer, or a fixed message for an empty notebook")

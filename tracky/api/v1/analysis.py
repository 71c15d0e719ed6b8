"""Analysis endpoint: ask the local LLM (Ollama) a question about one of the caller's notebooks."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tracky.api.deps import AppSettings, CurrentUserId
from tracky.core.database import get_db
from tracky.core.errors import NotFoundError
from tracky.schemas.analysis import AnalysisRequest, AnalysisResponse
from tracky.services import store
from tracky.services.analysis import AnalysisServiceError, analyze_notes

router = APIRouter()


@router.post("", response_model=AnalysisResponse)
async def post_analysis(
    body: AnalysisRequest,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    settings: AppSettings,
) -> AnalysisResponse:
    """
    Send every note of the notebook plus the conversation history to the LLM
    and return its answer. An empty notebook is answered without calling the LLM.
    """
    try:
        store.get_notebook(db, body.notebook_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notebook not found") from e

    notes = store.list_notes(db, user_id, body.notebook_id)
    try:
        answer = await analyze_notes(notes, body.question, body.history, settings)
    except AnalysisServiceError as e:
        raise HTTPException(status_code=502 if e.upstream else 503, detail=e.message) from e
    return AnalysisResponse(answer=answer)

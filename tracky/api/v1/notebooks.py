"""Notebook endpoints, all scoped to the calling user."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tracky.api.deps import AppSettings, CurrentUserId
from tracky.core.database import get_db
from tracky.core.errors import NotFoundError
from tracky.schemas.auth import MessageResponse
from tracky.schemas.notebook import (
    NotebookCreateRequest,
    NotebookResponse,
    NotebookUpdateRequest,
)
from tracky.services import store
from tracky.services.images import remove_image_files

router = APIRouter()


@router.get("", response_model=list[NotebookResponse])
def list_notebooks(
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
) -> list[NotebookResponse]:
    """Return the caller's notebooks, oldest first."""
    return [NotebookResponse.model_validate(nb) for nb in store.list_notebooks(db, user_id)]


@router.post("", response_model=NotebookResponse, status_code=status.HTTP_201_CREATED)
def create_notebook(
    body: NotebookCreateRequest,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
) -> NotebookResponse:
    notebook = store.create_notebook(db, user_id, body.name)
    return NotebookResponse.model_validate(notebook)


@router.patch("/{notebook_id}", response_model=NotebookResponse)
def rename_notebook(
    notebook_id: int,
    body: NotebookUpdateRequest,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
) -> NotebookResponse:
    try:
        notebook = store.rename_notebook(db, notebook_id, user_id, body.name)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notebook not found") from e
    return NotebookResponse.model_validate(notebook)


@router.delete("/{notebook_id}", response_model=MessageResponse)
def delete_notebook(
    notebook_id: int,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    settings: AppSettings,
) -> MessageResponse:
    """Delete a notebook with all of its notes and their image files."""
    try:
        filenames = store.delete_notebook(db, notebook_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notebook not found") from e
    remove_image_files(settings.UPLOAD_DIR, filenames)
    return MessageResponse(message="Notebook deleted")

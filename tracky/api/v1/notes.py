"""Note endpoints, all scoped to the calling user."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tracky.api.deps import AppSettings, CurrentUserId
from tracky.core.database import get_db
from tracky.core.errors import NotFoundError
from tracky.schemas.auth import MessageResponse
from tracky.schemas.note import NoteCreateRequest, NoteResponse, NoteUpdateRequest
from tracky.services import store
from tracky.services.images import remove_image_files

router = APIRouter()


@router.get("", response_model=list[NoteResponse])
def list_notes(
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    notebook_id: Annotated[int, Query(description="Notebook to list")],
    since: Annotated[datetime | None, Query(description="Only notes created at or after this time")] = None,
    until: Annotated[datetime | None, Query(description="Only notes created at or before this time")] = None,
) -> list[NoteResponse]:
    """
    Return the notes of one of the caller's notebooks, newest first, each with
    its images attached. 404 if the notebook is not the caller's.
    """
    if since is not None and until is not None and store.as_utc(since) > store.as_utc(until):
        raise HTTPException(status_code=422, detail="since must not be after until.")
    try:
        store.get_notebook(db, notebook_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notebook not found") from e
    notes = store.list_notes(db, user_id, notebook_id, since=since, until=until)
    return [NoteResponse.model_validate(n) for n in notes]


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    body: NoteCreateRequest,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    notebook_id: Annotated[int, Query(description="Notebook to add the note to")],
) -> NoteResponse:
    try:
        note = store.create_note(db, user_id, notebook_id, body.content)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notebook not found") from e
    return NoteResponse.model_validate(note)


@router.put("/{note_id}", response_model=MessageResponse)
def update_note(
    note_id: int,
    body: NoteUpdateRequest,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    try:
        store.update_note(db, note_id, user_id, body.content)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Note not found") from e
    return MessageResponse(message="Note updated")


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(
    note_id: int,
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
    settings: AppSettings,
) -> MessageResponse:
    """Delete a note and the files of its images."""
    try:
        filenames = store.delete_note(db, note_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Note not found") from e
    remove_image_files(settings.UPLOAD_DIR, filenames)
    return MessageResponse(message="Note deleted")

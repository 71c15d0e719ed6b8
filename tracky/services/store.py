"""
Ownership-scoped storage for users, notebooks, notes and images.

Every resource function takes the caller's user_id and filters on it, so a
row owned by someone else behaves exactly like a missing row: NotFoundError.
Mutations that affect zero rows are NotFoundError, never silent success.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from tracky.core.errors import NotFoundError, UsernameTakenError
from tracky.models import DEFAULT_NOTEBOOK_NAME, Note, NoteImage, Notebook, User

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Users -------------------------------------------------------------------


def create_user(db: Session, username: str, password_hash: str) -> User:
    """Insert a credential record. Raises UsernameTakenError and leaves the DB unchanged on duplicates."""
    user = User(username=username, password_hash=password_hash)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise UsernameTakenError(username) from e
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id})
    return user


def find_user_by_username(db: Session, username: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise NotFoundError("user")
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("user", user_id)
    return user


# --- Notebooks ---------------------------------------------------------------


def create_notebook(db: Session, user_id: int, name: str) -> Notebook:
    notebook = Notebook(user_id=user_id, name=name)
    db.add(notebook)
    db.commit()
    db.refresh(notebook)
    return notebook


def ensure_default_notebook(db: Session, user_id: int) -> Notebook | None:
    """Create the "Default" notebook if the user has none; return it, or None if one already existed."""
    has_notebook = db.query(Notebook.id).filter(Notebook.user_id == user_id).first()
    if has_notebook is not None:
        return None
    return create_notebook(db, user_id, DEFAULT_NOTEBOOK_NAME)


def list_notebooks(db: Session, user_id: int) -> list[Notebook]:
    return (
        db.query(Notebook)
        .filter(Notebook.user_id == user_id)
        .order_by(Notebook.created_at.asc(), Notebook.id.asc())
        .all()
    )


def get_notebook(db: Session, notebook_id: int, user_id: int) -> Notebook:
    notebook = (
        db.query(Notebook)
        .filter(Notebook.id == notebook_id, Notebook.user_id == user_id)
        .first()
    )
    if notebook is None:
        raise NotFoundError("notebook", notebook_id)
    return notebook


def rename_notebook(db: Session, notebook_id: int, user_id: int, name: str) -> Notebook:
    updated = (
        db.query(Notebook)
        .filter(Notebook.id == notebook_id, Notebook.user_id == user_id)
        .update({Notebook.name: name}, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        raise NotFoundError("notebook", notebook_id)
    db.commit()
    return get_notebook(db, notebook_id, user_id)


def delete_notebook(db: Session, notebook_id: int, user_id: int) -> list[str]:
    """
    Delete a notebook together with its notes and their image rows.

    Returns the image filenames that were attached so the caller can remove the files.
    """
    # Collected first: on Postgres the FK cascade removes these rows with the notebook
    note_ids = [
        note_id
        for (note_id,) in db.query(Note.id).filter(
            Note.notebook_id == notebook_id, Note.user_id == user_id
        )
    ]
    filenames: list[str] = []
    if note_ids:
        filenames = [
            filename
            for (filename,) in db.query(NoteImage.filename).filter(NoteImage.note_id.in_(note_ids))
        ]

    deleted = (
        db.query(Notebook)
        .filter(Notebook.id == notebook_id, Notebook.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise NotFoundError("notebook", notebook_id)

    if note_ids:
        db.query(NoteImage).filter(NoteImage.note_id.in_(note_ids)).delete(
            synchronize_session=False
        )
        db.query(Note).filter(Note.id.in_(note_ids)).delete(synchronize_session=False)
    db.commit()
    logger.info(
        "Notebook deleted",
        extra={"user_id": user_id, "notebook_id": notebook_id, "notes_deleted": len(note_ids)},
    )
    return filenames


# --- Notes -------------------------------------------------------------------


def create_note(db: Session, user_id: int, notebook_id: int, content: str) -> Note:
    """Create a note in one of the caller's notebooks. Raises NotFoundError for foreign notebooks."""
    get_notebook(db, notebook_id, user_id)
    note = Note(user_id=user_id, notebook_id=notebook_id, content=content)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def list_notes(
    db: Session,
    user_id: int,
    notebook_id: int,
    since: datetime | None = None,
    until: datetime | None = None,
) -> list[Note]:
    """Notes in a notebook, newest first, with images loaded; optional inclusive time range."""
    query = (
        db.query(Note)
        .options(selectinload(Note.images))
        .filter(Note.user_id == user_id, Note.notebook_id == notebook_id)
    )
    if since is not None:
        query = query.filter(Note.created_at >= as_utc(since))
    if until is not None:
        query = query.filter(Note.created_at <= as_utc(until))
    return query.order_by(Note.created_at.desc(), Note.id.desc()).all()


def get_note(db: Session, note_id: int, user_id: int) -> Note:
    note = db.query(Note).filter(Note.id == note_id, Note.user_id == user_id).first()
    if note is None:
        raise NotFoundError("note", note_id)
    return note


def update_note(db: Session, note_id: int, user_id: int, content: str) -> None:
    updated = (
        db.query(Note)
        .filter(Note.id == note_id, Note.user_id == user_id)
        .update({Note.content: content}, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        raise NotFoundError("note", note_id)
    db.commit()


def delete_note(db: Session, note_id: int, user_id: int) -> list[str]:
    """Delete a note and its image rows; return the image filenames that were attached."""
    filenames = [
        filename
        for (filename,) in db.query(NoteImage.filename)
        .join(Note, NoteImage.note_id == Note.id)
        .filter(NoteImage.note_id == note_id, Note.user_id == user_id)
    ]
    deleted = (
        db.query(Note)
        .filter(Note.id == note_id, Note.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise NotFoundError("note", note_id)
    db.query(NoteImage).filter(NoteImage.note_id == note_id).delete(synchronize_session=False)
    db.commit()
    return filenames


# --- Images ------------------------------------------------------------------


def create_note_image(db: Session, note_id: int, user_id: int, filename: str) -> NoteImage:
    """Attach an image row to one of the caller's notes."""
    get_note(db, note_id, user_id)
    image = NoteImage(note_id=note_id, filename=filename)
    db.add(image)
    db.commit()
    db.refresh(image)
    return image


def _owned_image(db: Session, image_id: int, user_id: int) -> NoteImage:
    image = (
        db.query(NoteImage)
        .join(Note, NoteImage.note_id == Note.id)
        .filter(NoteImage.id == image_id, Note.user_id == user_id)
        .first()
    )
    if image is None:
        raise NotFoundError("image", image_id)
    return image


def get_note_image_filename(db: Session, image_id: int, user_id: int) -> str:
    """Filename of an image whose note belongs to user_id."""
    return _owned_image(db, image_id, user_id).filename


def delete_note_image(db: Session, image_id: int, user_id: int) -> str:
    """Delete an image the caller owns through its note; return its filename."""
    image = _owned_image(db, image_id, user_id)
    filename = image.filename
    db.delete(image)
    db.commit()
    return filename

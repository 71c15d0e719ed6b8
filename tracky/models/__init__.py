"""SQLAlchemy ORM models."""

from tracky.models.base import Base
from tracky.models.note import Note, NoteImage
from tracky.models.notebook import DEFAULT_NOTEBOOK_NAME, Notebook
from tracky.models.user import User

__all__ = ["Base", "DEFAULT_NOTEBOOK_NAME", "Note", "NoteImage", "Notebook", "User"]

"""ORM models for notes and the images attached to them."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from tracky.models.base import Base, utc_now


class Note(Base):
    """
    A note belongs to exactly one user and one notebook.

    user_id is stored on the row (not only derived from the notebook) so every
    ownership check is a single-table filter.
    """

    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    notebook_id = Column(
        Integer,
        ForeignKey("notebooks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        index=True,
    )

    notebook = relationship("Notebook", back_populates="notes")
    images = relationship(
        "NoteImage",
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="NoteImage.id",
    )


class NoteImage(Base):
    """Image file attached to a note; owned transitively through the note."""

    __tablename__ = "note_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    note_id = Column(
        Integer,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filename = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    note = relationship("Note", back_populates="images")

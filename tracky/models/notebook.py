"""ORM model for notebooks (named groups of notes owned by one user)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from tracky.models.base import Base, utc_now

DEFAULT_NOTEBOOK_NAME = "Default"


class Notebook(Base):
    __tablename__ = "notebooks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    owner = relationship("User", back_populates="notebooks")
    notes = relationship("Note", back_populates="notebook", passive_deletes=True)

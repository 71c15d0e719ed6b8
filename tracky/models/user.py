"""ORM model for application users (credential records)."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from tracky.models.base import Base


class User(Base):
    """
    User account: the integer id is the identity every token resolves to.

    username is unique and compared case-sensitively.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    notebooks = relationship("Notebook", back_populates="owner", passive_deletes=True)

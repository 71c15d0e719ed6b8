"""Core app configuration, database, and authentication primitives."""

from tracky.core.config import Settings, get_settings
from tracky.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]

"""Core app configuration and database."""

from inkwell.core.config import Settings, get_settings
from inkwell.core.database import Database, get_db

__all__ = ["Database", "Settings", "get_db", "get_settings"]

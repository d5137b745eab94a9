"""Core app configuration, database and classification taxonomy."""

from firmwatch.core.config import get_settings, settings
from firmwatch.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

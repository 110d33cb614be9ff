"""Core app configuration, database, security and errors."""

from medadmin.core.config import Settings, get_settings
from medadmin.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]

"""Core app configuration, database, security and error handling."""

from insurance_api.core.config import get_settings, settings
from insurance_api.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

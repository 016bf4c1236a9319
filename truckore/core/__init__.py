"""Core app configuration, security helpers and errors."""

from truckore.core.config import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]

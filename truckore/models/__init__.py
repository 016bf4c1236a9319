"""SQLAlchemy table definitions shared by the native and fallback stores."""

from truckore.models.app_config import AppConfig
from truckore.models.base import Base
from truckore.models.security_log import SecurityLog
from truckore.models.user import User

__all__ = ["AppConfig", "Base", "SecurityLog", "User"]

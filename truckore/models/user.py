"""Table definition for user accounts (auth, roles and lockout state)."""

from sqlalchemy import Boolean, Column, Integer, String

from truckore.models.base import Base


class User(Base):
    """
    User account for authentication and role-based access control.

    role: 'super_admin', 'admin' or 'operator'. Timestamps are stored as
    ISO-8601 UTC strings so the fallback store can hold identical rows.
    """

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(String(32), nullable=True)
    last_login_at = Column(String(32), nullable=True)
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)

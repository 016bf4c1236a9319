"""Table definition for the append-only security audit trail."""

from sqlalchemy import Column, String, Text

from truckore.models.base import Base


class SecurityLog(Base):
    """One security-relevant event. user_id is null for unknown usernames."""

    __tablename__ = "security_logs"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=True, index=True)
    action = Column(String(32), nullable=False)
    details = Column(Text, nullable=True)
    timestamp = Column(String(32), nullable=False, index=True)

"""Table definition for process-wide key/value settings."""

from sqlalchemy import Column, String, Text

from truckore.models.base import Base


class AppConfig(Base):
    __tablename__ = "app_config"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(String(32), nullable=False)

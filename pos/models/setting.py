"""Setting model - one JSON document per settings section."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON
from pos.database import Base


class Setting(Base):
    """Persisted overrides for a settings section (business_info, wholesale_settings, ...)."""

    __tablename__ = 'setting'

    key = Column(String(50), primary_key=True)
    value = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<Setting(key='{self.key}')>"

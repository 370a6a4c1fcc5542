"""Saved form structures (field names, types and options; never values)."""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from intakefill.app.db.base import Base


class FormPreset(Base):
    """Reusable field layout of a form - loaded later without the original PDF."""
    __tablename__ = "form_presets"

    id = Column(String(120), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    field_count = Column(Integer, default=0)
    fields = Column(JSON, nullable=False, default=list)  # [{name, type, options}]
    created_at = Column(DateTime, default=datetime.utcnow)
    last_used = Column(DateTime, default=datetime.utcnow, index=True)

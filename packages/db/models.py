"""
SQLAlchemy ORM models for intake persistence.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone as dt_timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text, JSON
from sqlalchemy.orm import DeclarativeBase

def _uuid():
    return uuid.uuid4().hex

def utcnow():
    return datetime.now(dt_timezone.utc)

class Base(DeclarativeBase):
    pass


class AutomationLog(Base):
    __tablename__ = "automation_logs"

    id = Column(String(120), primary_key=True, default=_uuid)
    chain_name = Column(String(200), nullable=False)
    source_id = Column(String(300), nullable=True, index=True)  # LAST_FIRST__MM_DD_YYYY
    entry_path = Column(String(50), nullable=True)  # ambient_dictation | manual_entry | ...
    status = Column(String(20), nullable=False)  # success | error
    chain_run_id = Column(String(120), nullable=True)
    http_status = Column(Integer, nullable=True)
    extraction_confidence = Column(Float, nullable=True)
    request_json = Column(JSON, nullable=True)
    response_json = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

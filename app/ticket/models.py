# app/ticket/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from app.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(80), nullable=False)
    description = Column(String(500), nullable=False)
    priority = Column(String(16), nullable=False, index=True)
    status = Column(String(16), default="Open", nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    assignee = Column(String, nullable=True)

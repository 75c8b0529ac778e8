"""Base SQLAlchemy model utilities."""
from datetime import datetime
import uuid
from sqlalchemy import Column, DateTime, String


def new_uuid() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class UUIDMixin:
    id = Column(String(36), primary_key=True, default=new_uuid)

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Text
from .session import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValue(Base):
    """Small key-value store for values such as the personal best."""
    __tablename__ = "kv_store"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Score(Base):
    """A score posted to a room's leaderboard."""
    __tablename__ = "scores"

    id = Column(Integer, primary_key=True, index=True)
    room = Column(String(50), index=True, nullable=False)
    name = Column(String(20), nullable=False)
    score = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

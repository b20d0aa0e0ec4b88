"""Conversation summary models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime, Integer, String, Text

from ..db import Base
from .session import utcnow


class ConversationSummary(Base):
    """Post-call summary persisted once per telephony call."""

    __tablename__ = "conversation_summaries"

    id = Column(Integer, primary_key=True, index=True)
    call_id = Column(String(64), nullable=False, unique=True, index=True)
    remote_session_id = Column(String(64), nullable=True, index=True)
    caller_number = Column(String(64), nullable=True, index=True)

    summary = Column(Text, nullable=True)
    topics_discussed = Column(Text, nullable=True)
    # Values: summarized, failed
    status = Column(String(20), nullable=False, default="summarized")

    call_duration_seconds = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    call_started_at = Column(DateTime(timezone=True), nullable=True)
    call_ended_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ConversationSummary(id={self.id}, call_id={self.call_id}, status={self.status})>"


class SummaryResponse(BaseModel):
    """Response model for a conversation summary."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    call_id: str
    remote_session_id: str | None
    caller_number: str | None
    summary: str | None
    topics_discussed: str | None
    status: str
    call_duration_seconds: int | None = None
    created_at: datetime | None = None
    call_started_at: datetime | None = None
    call_ended_at: datetime | None = None


class GenerateSummaryRequest(BaseModel):
    """Request for manually (re)running summarization of a call."""

    call_id: str | None = None
    remote_session_id: str
    caller_number: str = "unknown"

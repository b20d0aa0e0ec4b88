"""Call session data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, Enum):
    """Lifecycle state of a call session."""

    CREATING = "creating"  # registered, remote voice session not confirmed yet
    ACTIVE = "active"  # bridged to a remote voice session
    ENDING = "ending"  # removed from the registry, summary pending
    SUMMARIZED = "summarized"
    FAILED = "failed"


@dataclass
class SessionRecord:
    """In-memory state of one phone call."""

    external_call_id: str
    caller_identifier: str | None = None
    remote_session_id: str | None = None
    join_url: str | None = None
    state: SessionState = SessionState.CREATING
    created_at: datetime = field(default_factory=utcnow)
    ended_at: datetime | None = None


class ActiveCallResponse(BaseModel):
    """Response model for one live call in the registry."""

    call_id: str
    remote_session_id: str | None
    caller_number: str
    state: SessionState
    created_at: datetime

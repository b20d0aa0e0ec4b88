"""Concurrent registry of live calls keyed by telephony call id."""

import logging
import threading
from dataclasses import replace

from ..models.session import SessionRecord, SessionState, utcnow

logger = logging.getLogger(__name__)


class DuplicateSessionError(Exception):
    """A live session already exists for the call id."""

    def __init__(self, call_id: str):
        super().__init__(f"Session already exists for call {call_id}")
        self.call_id = call_id


class SessionRegistry:
    """Owns the call-session state machine.

    Records move CREATING -> ACTIVE and leave the registry through
    ``take_for_termination``, from either state. Every mutation happens under
    the registry lock inside one of ``create``, ``attach_remote_session`` and
    ``take_for_termination``; readers only ever get copies.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionRecord] = {}

    def create(self, call_id: str, caller_identifier: str | None = None) -> SessionRecord:
        with self._lock:
            if call_id in self._sessions:
                raise DuplicateSessionError(call_id)
            record = SessionRecord(external_call_id=call_id, caller_identifier=caller_identifier)
            self._sessions[call_id] = record
            return replace(record)

    def attach_remote_session(
        self,
        call_id: str,
        remote_session_id: str,
        join_url: str | None = None,
    ) -> bool:
        """Mark the call ACTIVE; returns False if the call already ended."""
        with self._lock:
            record = self._sessions.get(call_id)
            if record is None:
                return False
            if record.state is not SessionState.CREATING:
                logger.warning(
                    f"Ignoring remote session {remote_session_id} for {call_id} "
                    f"in state {record.state.value}"
                )
                return False
            record.remote_session_id = remote_session_id
            record.join_url = join_url
            record.state = SessionState.ACTIVE
            return True

    def take_for_termination(self, call_id: str) -> SessionRecord | None:
        """Remove and return the record; only one caller per call gets it."""
        with self._lock:
            record = self._sessions.pop(call_id, None)
        if record is None:
            return None
        record.state = SessionState.ENDING
        record.ended_at = utcnow()
        return record

    def get(self, call_id: str) -> SessionRecord | None:
        with self._lock:
            record = self._sessions.get(call_id)
            return replace(record) if record else None

    def snapshot(self) -> list[SessionRecord]:
        with self._lock:
            return [replace(record) for record in self._sessions.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, call_id: str) -> bool:
        with self._lock:
            return call_id in self._sessions

"""Reacts to Twilio call-control events and drives the call-session lifecycle."""

import logging

from ..services import twiml
from ..services.ultravox_service import VoiceSessionProvider
from .dispatcher import SummaryDispatcher
from .registry import DuplicateSessionError, SessionRegistry

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {"completed"}


class CallOrchestrator:
    """Turns webhook events into registry transitions and summary dispatches."""

    def __init__(
        self,
        registry: SessionRegistry,
        voice_sessions: VoiceSessionProvider,
        dispatcher: SummaryDispatcher,
    ):
        self.registry = registry
        self.voice_sessions = voice_sessions
        self.dispatcher = dispatcher

    async def handle_incoming_call(self, call_id: str, caller: str | None, base_url: str) -> str:
        """Create the remote voice session and return the TwiML bridging the call to it.

        Any failure yields TwiML that apologizes and hangs up.
        """
        logger.info(f"Incoming call - CallSid: {call_id}, From: {caller}")

        try:
            self.registry.create(call_id, caller)
        except DuplicateSessionError:
            existing = self.registry.get(call_id)
            if existing and existing.join_url:
                logger.info(f"Call {call_id} already bridged, re-sending stream TwiML")
                return twiml.connect_stream(existing.join_url, base_url)
            logger.warning(f"Call {call_id} is already being set up")
            return twiml.apology_and_hangup()

        try:
            remote = await self.voice_sessions.create_call(call_id, base_url)
        except Exception:
            logger.error(f"Error creating voice session for call {call_id}", exc_info=True)
            # The apology hangs up, so no stream-ended callback will follow.
            self.end_call(call_id, "failed-setup")
            return twiml.apology_and_hangup()

        if not self.registry.attach_remote_session(call_id, remote.call_id, remote.join_url):
            logger.warning(f"Call {call_id} ended before voice session {remote.call_id} was attached")
            return twiml.hangup()

        logger.info(f"Ultravox session created, Call ID: {remote.call_id}, connecting stream to: {remote.join_url}")
        return twiml.connect_stream(remote.join_url, base_url)

    def end_call(self, call_id: str, reason: str) -> bool:
        """Terminate the call's session and dispatch its summary; False if already gone."""
        record = self.registry.take_for_termination(call_id)
        if record is None:
            logger.warning(f"No call info found for {reason} call: {call_id}")
            return False

        logger.info(
            f"Generating summary for ended call - CallSid: {call_id}, "
            f"UltravoxId: {record.remote_session_id}"
        )
        self.dispatcher.dispatch(record)
        return True

    def handle_stream_ended(self, call_id: str, status: str | None = None) -> str:
        logger.info(f"Stream ended - CallSid: {call_id}, Status: {status}")
        self.end_call(call_id, "stream-ended")
        return twiml.hangup()

    def handle_call_status(
        self,
        call_id: str,
        status: str | None,
        duration: str | None = None,
    ) -> str:
        logger.info(f"Call status update - CallSid: {call_id}, Status: {status}, Duration: {duration}s")
        if status and status.lower() in TERMINAL_STATUSES:
            self.end_call(call_id, "completed")
        return "OK"

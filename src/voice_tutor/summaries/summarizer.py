"""Post-call summary generation."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from ..models.session import SessionState, utcnow
from ..models.summary import ConversationSummary
from ..services.llm_client import TextGenerator
from ..services.ultravox_service import VoiceSessionProvider
from .repository import SummaryRepository

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """You are an expert at creating concise educational summaries.

Based on the following conversation transcript between a student and an AI tutor,
create a brief summary including:
1. Main topics discussed (comma-separated list)
2. Key questions the student asked
3. Overall summary (2-3 sentences)

Format your response as:
TOPICS: [topics]
SUMMARY: [summary]

Transcript:
{transcript}"""

NO_TRANSCRIPT = "No transcript available"
DEFAULT_TOPICS = "General ICT topics"
TOPICS_MARKER = "TOPICS:"
SUMMARY_MARKER = "SUMMARY:"


@dataclass
class ParsedSummary:
    topics: str
    summary: str


def parse_summary_response(response: str | None) -> ParsedSummary:
    """Split a ``TOPICS: ... SUMMARY: ...`` response into its two parts."""
    if response is None:
        return ParsedSummary(topics="Unknown", summary="No summary available")

    topics_start = response.find(TOPICS_MARKER)
    summary_start = response.find(SUMMARY_MARKER)

    topics = DEFAULT_TOPICS
    if topics_start >= 0 and summary_start > topics_start:
        topics = response[topics_start + len(TOPICS_MARKER):summary_start].strip()

    if summary_start >= 0:
        summary = response[summary_start + len(SUMMARY_MARKER):].strip()
    else:
        summary = response

    return ParsedSummary(topics=topics, summary=summary)


def _duration_seconds(started: datetime | None, ended: datetime | None) -> int | None:
    if started is None or ended is None:
        return None
    return max(0, int((ended - started).total_seconds()))


class ConversationSummarizer:
    """Builds and stores the summary of a finished call.

    ``summarize`` never raises: any failure while fetching the transcript or
    generating the summary is stored as a degraded record instead.
    """

    def __init__(
        self,
        voice_sessions: VoiceSessionProvider,
        generator: TextGenerator,
        repository: SummaryRepository,
    ):
        self.voice_sessions = voice_sessions
        self.generator = generator
        self.repository = repository

    async def _fetch_transcript(self, remote_session_id: str | None) -> str:
        transcript = ""
        if remote_session_id:
            transcript = await self.voice_sessions.fetch_transcript(remote_session_id)
        if not transcript or not transcript.strip():
            logger.warning(f"No transcript available for call: {remote_session_id}")
            return NO_TRANSCRIPT
        return transcript

    async def _save(self, record: ConversationSummary) -> ConversationSummary:
        return await asyncio.to_thread(self.repository.save, record)

    async def summarize(
        self,
        call_id: str,
        remote_session_id: str | None,
        caller_number: str | None,
        call_started_at: datetime | None = None,
        call_ended_at: datetime | None = None,
    ) -> ConversationSummary:
        logger.info(f"Processing completed call: {call_id} (Ultravox: {remote_session_id})")
        ended_at = call_ended_at or utcnow()
        fields = dict(
            call_id=call_id,
            remote_session_id=remote_session_id,
            caller_number=caller_number,
            call_started_at=call_started_at,
            call_ended_at=ended_at,
            call_duration_seconds=_duration_seconds(call_started_at, ended_at),
        )

        try:
            transcript = await self._fetch_transcript(remote_session_id)
            response = await self.generator.generate(SUMMARY_PROMPT.format(transcript=transcript))
            parsed = parse_summary_response(response)
            record = ConversationSummary(
                summary=parsed.summary,
                topics_discussed=parsed.topics,
                status=SessionState.SUMMARIZED.value,
                **fields,
            )
            saved = await self._save(record)
            logger.info(f"Saved conversation summary with ID: {saved.id}")
            return saved
        except Exception as e:
            logger.error(f"Error processing completed call: {call_id}", exc_info=True)
            reason = str(e) or type(e).__name__

        error_record = ConversationSummary(
            summary=f"Error processing call: {reason}",
            status=SessionState.FAILED.value,
            **fields,
        )
        try:
            return await self._save(error_record)
        except Exception:
            logger.exception(f"Could not persist error summary for call: {call_id}")
            return error_record

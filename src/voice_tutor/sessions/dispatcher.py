"""Detached post-call summary tasks."""

import asyncio
import logging

from ..models.session import SessionRecord, SessionState
from ..summaries.summarizer import ConversationSummarizer

logger = logging.getLogger(__name__)


class SummaryDispatcher:
    """Runs one summarization task per terminated call outside the webhook response."""

    def __init__(self, summarizer: ConversationSummarizer):
        self.summarizer = summarizer
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, record: SessionRecord) -> asyncio.Task:
        """Schedule summarization of ``record``; must be called from the event loop."""
        task = asyncio.create_task(
            self._run(record),
            name=f"summarize-{record.external_call_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, record: SessionRecord) -> None:
        call_id = record.external_call_id
        try:
            summary = await self.summarizer.summarize(
                call_id,
                record.remote_session_id,
                record.caller_identifier,
                call_started_at=record.created_at,
                call_ended_at=record.ended_at,
            )
        except Exception:
            record.state = SessionState.FAILED
            logger.exception(f"Error generating summary for call: {call_id}")
            return

        record.state = SessionState(summary.status)
        if record.state is SessionState.SUMMARIZED:
            logger.info(f"Summary generated successfully for call: {call_id}")
        else:
            logger.warning(f"Stored degraded summary for call: {call_id}")

    async def drain(self) -> None:
        """Wait for every in-flight summary task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

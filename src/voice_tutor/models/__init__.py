"""Data models for the Voice Tutor service."""

from .document import IngestResponse, Passage, ScoredPassage, TextIngestRequest
from .session import SessionRecord, SessionState
from .summary import ConversationSummary, GenerateSummaryRequest, SummaryResponse

__all__ = [
    "ConversationSummary",
    "GenerateSummaryRequest",
    "IngestResponse",
    "Passage",
    "ScoredPassage",
    "SessionRecord",
    "SessionState",
    "SummaryResponse",
    "TextIngestRequest",
]

"""Post-call summaries."""

from .repository import SummaryRepository
from .summarizer import ConversationSummarizer, parse_summary_response

__all__ = ["ConversationSummarizer", "SummaryRepository", "parse_summary_response"]

"""Call session lifecycle."""

from .dispatcher import SummaryDispatcher
from .orchestrator import CallOrchestrator
from .registry import DuplicateSessionError, SessionRegistry

__all__ = ["CallOrchestrator", "DuplicateSessionError", "SessionRegistry", "SummaryDispatcher"]

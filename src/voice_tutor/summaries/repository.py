"""Persistence for conversation summaries."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ..models.summary import ConversationSummary

UPDATABLE_FIELDS = (
    "remote_session_id",
    "caller_number",
    "summary",
    "topics_discussed",
    "status",
    "call_duration_seconds",
    "call_started_at",
    "call_ended_at",
)


class SummaryRepository:
    """Stores one summary per call id; saving again replaces the content."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _find(self, session: Session, call_id: str) -> ConversationSummary | None:
        return session.scalar(select(ConversationSummary).where(ConversationSummary.call_id == call_id))

    def _upsert(self, session: Session, summary: ConversationSummary) -> ConversationSummary:
        existing = self._find(session, summary.call_id)
        if existing is None:
            session.add(summary)
            target = summary
        else:
            for name in UPDATABLE_FIELDS:
                setattr(existing, name, getattr(summary, name))
            target = existing
        session.commit()
        session.refresh(target)
        return target

    def save(self, summary: ConversationSummary) -> ConversationSummary:
        with self.session_factory() as session:
            try:
                return self._upsert(session, summary)
            except IntegrityError:
                # Another writer inserted this call id between the lookup and the commit.
                session.rollback()
                return self._upsert(session, summary)

    def get(self, summary_id: int) -> ConversationSummary | None:
        with self.session_factory() as session:
            return session.get(ConversationSummary, summary_id)

    def get_by_call_id(self, call_id: str) -> ConversationSummary | None:
        with self.session_factory() as session:
            return session.scalar(
                select(ConversationSummary).where(ConversationSummary.call_id == call_id)
            )

    def list_all(self) -> list[ConversationSummary]:
        """All summaries, most recent first."""
        with self.session_factory() as session:
            return list(
                session.scalars(
                    select(ConversationSummary).order_by(
                        ConversationSummary.created_at.desc(), ConversationSummary.id.desc()
                    )
                )
            )

    def list_by_caller(self, caller_number: str) -> list[ConversationSummary]:
        with self.session_factory() as session:
            return list(
                session.scalars(
                    select(ConversationSummary)
                    .where(ConversationSummary.caller_number == caller_number)
                    .order_by(ConversationSummary.created_at.desc(), ConversationSummary.id.desc())
                )
            )

"""In-memory registry of live quiz sessions.

Quiz state is never persisted; only submitted leads are.  Sessions that
sit idle longer than the configured window are dropped on the next
registry access.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from compass_quiz.interfaces import LeadSink
from compass_quiz.models.catalog import QuizCatalog
from compass_quiz.session import QuizSession

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """Creates, looks up and expires :class:`QuizSession` objects."""

    def __init__(
        self,
        catalog: QuizCatalog,
        sink: LeadSink,
        *,
        idle_minutes: int = 60,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._catalog = catalog
        self._sink = sink
        self._idle = timedelta(minutes=idle_minutes)
        self._clock = clock
        self._sessions: dict[str, QuizSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, *, client_info: str = "") -> QuizSession:
        self.purge_idle()
        session = QuizSession(
            self._catalog,
            sink=self._sink,
            clock=self._clock,
            client_info=client_info,
        )
        self._sessions[session.session_id] = session
        logger.info("Created quiz session %s", session.session_id)
        return session

    def get(self, session_id: str) -> QuizSession:
        """Return a live session.

        Raises:
            ValueError: if the session does not exist or has expired.
        """
        self.purge_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        return session

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise ValueError(f"Session not found: session_id={session_id}")

    def purge_idle(self) -> int:
        """Drop sessions idle past the window.  Returns how many were dropped."""
        cutoff = self._clock() - self._idle
        stale = [sid for sid, s in self._sessions.items() if s.last_active < cutoff]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.info("Expired %d idle quiz sessions", len(stale))
        return len(stale)

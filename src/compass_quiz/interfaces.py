"""Abstract interface for the lead persistence collaborator.

The SDK never talks to a database or an HTTP endpoint directly.  A quiz
session is handed a ``LeadSink`` and awaits it once per submission::

    sink: LeadSink = DatabaseLeadSink(get_session_factory())
    session = QuizSession(catalog, sink=sink)
    # ... answer questions, finish, set contact ...
    outcome = await session.submit_and_reveal()

Concrete sinks live in ``compass_db.sink`` (PostgreSQL) and
``compass_quiz.webhook`` (HTTP POST).
"""

from abc import ABC, abstractmethod

from compass_quiz.models.lead import LeadPayload


class LeadSink(ABC):
    """Durably stores a lead.

    Implementations handle their own uniqueness and consistency; the
    session does not deduplicate beyond its in-flight guard.
    """

    @abstractmethod
    async def save(self, payload: LeadPayload) -> None:
        """Persist ``payload``.

        Raises
        ------
        LeadSinkError
            On any failure, with a message suitable for showing to the user.
        """
        ...

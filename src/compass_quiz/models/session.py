"""Session models — the contract between the quiz session and API callers.

These are read-only views.  The mutable state lives on
:class:`compass_quiz.session.QuizSession`; ``snapshot()`` turns it into a
``SessionState`` so a UI never touches the session internals.
"""

import enum
from typing import Optional

from pydantic import BaseModel

from .question import QuizQuestion


class SubmissionState(str, enum.Enum):
    """Lead submission lifecycle.

    Transitions:
        idle -> submitting       (valid contact, sink call started)
        submitting -> revealed   (sink reported success)
        submitting -> idle       (sink failed or timed out; retriable)
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    REVEALED = "revealed"


class SubmissionOutcome(BaseModel):
    """Result of one ``submit_and_reveal()`` call.

    ``error`` carries a user-displayable message when the reveal did not
    happen.
    """

    state: SubmissionState
    revealed: bool
    error: Optional[str] = None


class SessionState(BaseModel):
    """Public view of a quiz session."""

    session_id: str
    position: int
    total: int
    progress: float
    current_question: Optional[QuizQuestion] = None
    can_proceed: bool
    completed: bool
    answered: list[str]
    contact_email: str
    contact_phone: str
    submission: SubmissionState
    submit_error: Optional[str] = None
    revealed: bool

"""QuizSession — navigation state machine and lead-gated reveal for one quiz run.

One instance per user session, held by the caller (the HTTP layer keeps
them in a registry).  The session exclusively owns the answer map, the
position and the submission state; nothing else mutates them.

Navigation states::

    Answering(0) ─go_next─► Answering(1) ─► ... ─► Answering(N-1) ─go_next─► Completed
         ▲                                                 │ ▲                   │
         └───────────────────── go_back ───────────────────┘ └──── go_back ──────┘

``go_next`` is refused (no-op) while the current question is not validly
answered.  ``Completed`` is represented as position ``N``.

Submission states::

    idle ──► submitting ──► revealed
               │
               └──► idle   (sink error / timeout; retry allowed)

Only one submission can be in flight; a second call while submitting
returns immediately without touching the sink.  A reset while submitting
discards that submission's outcome.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from compass_quiz.catalog import build_sequence
from compass_quiz.constants import (
    INVALID_CONTACT_MESSAGE,
    SINK_FAILURE_MESSAGE,
    SUBMIT_IN_PROGRESS_MESSAGE,
    SUBMIT_TIMEOUT_MESSAGE,
    SUBMIT_TIMEOUT_SECONDS,
)
from compass_quiz.errors import LeadSinkError
from compass_quiz.interfaces import LeadSink
from compass_quiz.leads import build_payload, is_valid_contact
from compass_quiz.models.answer import (
    CategoryAnswer,
    QuizAnswers,
    ScoreAnswer,
    TagAnswer,
    YearAnswer,
    coerce_answer,
)
from compass_quiz.models.catalog import QuizCatalog
from compass_quiz.models.question import QuizQuestion
from compass_quiz.models.result import FormattedResult, QuizResult
from compass_quiz.models.session import SessionState, SubmissionOutcome, SubmissionState
from compass_quiz.scoring import format_result, parse_birth_year, process

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizSession:
    """State for one pass through the quiz.

    Args:
        catalog: the loaded :class:`QuizCatalog`
        sink: where leads are persisted on ``submit_and_reveal``
        session_id: caller-chosen id; a random hex id if omitted
        rng: randomness for option shuffling (seed it in tests)
        clock: returns the current UTC datetime; drives age bounds and
            payload timestamps
        client_info: opaque client metadata stored with the lead
            (e.g. the browser's user agent)
        submit_timeout: seconds to wait on the sink before giving up
    """

    def __init__(
        self,
        catalog: QuizCatalog,
        *,
        sink: LeadSink | None = None,
        session_id: str | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
        client_info: str = "",
        submit_timeout: float = SUBMIT_TIMEOUT_SECONDS,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self._catalog = catalog
        self._sink = sink
        self._clock = clock
        self.client_info = client_info
        self._submit_timeout = submit_timeout

        # Built once; reset() keeps it so options never reorder mid-session
        self._questions = build_sequence(catalog, rng)
        self._by_id: dict[str, QuizQuestion] = {q.id: q for q in self._questions}

        self._generation = 0
        self._clear()
        self.last_active = clock()

    def _clear(self) -> None:
        # Bumped on every reset; an in-flight submit from an older
        # generation must not touch the new run.
        self._generation += 1
        self._position = 0
        self._completed = False
        self._answers: QuizAnswers = {}
        self.contact_email = ""
        self.contact_phone = ""
        self._submission = SubmissionState.IDLE
        self.submit_error: str | None = None

    # ==================================================================
    # Read-only views
    # ==================================================================

    @property
    def questions(self) -> list[QuizQuestion]:
        return list(self._questions)

    def get_questions(self) -> list[QuizQuestion]:
        return self.questions

    @property
    def total(self) -> int:
        return len(self._questions)

    @property
    def position(self) -> int:
        """Current index; equals ``total`` once completed."""
        return self._position

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def answers(self) -> QuizAnswers:
        """Copy of the answer map."""
        return dict(self._answers)

    @property
    def submission(self) -> SubmissionState:
        return self._submission

    @property
    def revealed(self) -> bool:
        return self._submission is SubmissionState.REVEALED

    @property
    def current_question(self) -> QuizQuestion | None:
        if self._completed or not 0 <= self._position < self.total:
            return None
        return self._questions[self._position]

    def progress(self) -> float:
        return min(100.0, (self._position + 1) / self.total * 100)

    def is_answered(self, position: int | None = None) -> bool:
        """Type-specific validity of the answer stored for ``position``.

        Defaults to the current position.  Positions outside the sequence
        are never answered.
        """
        if position is None:
            position = self._position
        if not 0 <= position < self.total:
            return False

        question = self._questions[position]
        answer = self._answers.get(question.id)
        if answer is None:
            return False

        qt = question.type
        if qt == "phq":
            return isinstance(answer, ScoreAnswer)
        if qt == "planet":
            return isinstance(answer, TagAnswer)
        if qt == "input_year":
            return (
                isinstance(answer, YearAnswer)
                and parse_birth_year(answer.year, self._clock().year) is not None
            )
        if qt == "select_nat":
            return (
                isinstance(answer, CategoryAnswer)
                and answer.category in self._catalog.category_codes
            )
        return True

    def can_proceed(self) -> bool:
        return not self._completed and self.is_answered()

    # ==================================================================
    # Mutations — answers and navigation
    # ==================================================================

    def select_answer(self, question_id: str, value: Any) -> None:
        """Store (or overwrite) the answer for ``question_id``.

        Never moves the position and never validates the value; any
        question in the sequence may be answered regardless of which one is
        showing.

        Raises:
            ValueError: a tagged answer whose kind does not fit the
                question type.
            KeyError: ``value`` is a bare value and ``question_id`` is not
                in the sequence, so there is no type to coerce it to.
        """
        question = self._by_id.get(question_id)
        self._answers[question_id] = coerce_answer(question, value)
        self._touch()

    def go_next(self) -> bool:
        """Advance if the current question is answered.  Returns True if moved."""
        if not self.can_proceed():
            return False
        if self._position == self.total - 1:
            self._complete()
        else:
            self._position += 1
        self._touch()
        return True

    def go_back(self) -> bool:
        """Step back one question.  From Completed, returns to the last question."""
        if self._completed:
            self._completed = False
            self._position = self.total - 1
            self._touch()
            return True
        if self._position > 0:
            self._position -= 1
            self._touch()
            return True
        return False

    def finish(self) -> None:
        """Mark the quiz completed without further validation."""
        self._complete()
        self._touch()

    def _complete(self) -> None:
        self._completed = True
        self._position = self.total
        logger.info("Quiz session %s completed", self.session_id)

    def reset(self) -> None:
        """Back to the first question with nothing answered.

        The question order and option shuffle are kept.
        """
        self._clear()
        self._touch()

    # ==================================================================
    # Results
    # ==================================================================

    def result(self) -> QuizResult:
        """Score the current answers.

        Raises:
            ValueError: if the quiz is not completed yet.
        """
        if not self._completed:
            raise ValueError(
                f"Quiz not completed: session_id={self.session_id}, "
                f"position={self._position}/{self.total}"
            )
        return process(self._answers, self._catalog, current_year=self._clock().year)

    def formatted_result(self) -> FormattedResult:
        return format_result(self.result(), self._catalog)

    # ==================================================================
    # Contact capture and reveal
    # ==================================================================

    def set_contact_email(self, value: str) -> None:
        self.contact_email = value or ""
        self._touch()

    def set_contact_phone(self, value: str) -> None:
        self.contact_phone = value or ""
        self._touch()

    async def submit_and_reveal(self) -> SubmissionOutcome:
        """Persist the lead and unlock the result.

        On success the session moves to ``revealed`` for good (until
        :meth:`reset`).  On failure the error message is returned and the
        session returns to ``idle``; answers, result and contact fields
        are left untouched so the user can retry.  A submission that is still
        in flight when the session is reset completes against the sink but
        leaves the reset session idle.

        Raises:
            ValueError: if the quiz is not completed.
            RuntimeError: if the session was built without a sink.
        """
        result = self.result()

        if self._submission is SubmissionState.REVEALED:
            return self._outcome()
        if self._submission is SubmissionState.SUBMITTING:
            logger.warning("Session %s: submission already in flight", self.session_id)
            return self._outcome(SUBMIT_IN_PROGRESS_MESSAGE)

        if not is_valid_contact(self.contact_email, self.contact_phone):
            self.submit_error = INVALID_CONTACT_MESSAGE
            return self._outcome(INVALID_CONTACT_MESSAGE)

        if self._sink is None:
            raise RuntimeError(f"Session {self.session_id} has no lead sink configured")

        payload = build_payload(
            self._answers,
            result,
            self.contact_email,
            self.contact_phone,
            client_info=self.client_info,
            now=self._clock(),
        )

        generation = self._generation
        self._submission = SubmissionState.SUBMITTING
        self.submit_error = None
        error: str | None = None
        try:
            await asyncio.wait_for(self._sink.save(payload), timeout=self._submit_timeout)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._submission = SubmissionState.IDLE
            raise
        except asyncio.TimeoutError:
            logger.warning(
                "Session %s: lead sink timed out after %.1fs",
                self.session_id, self._submit_timeout,
            )
            error = SUBMIT_TIMEOUT_MESSAGE
        except LeadSinkError as exc:
            logger.warning("Session %s: lead submission failed: %s", self.session_id, exc)
            error = str(exc)
        except Exception:
            logger.exception("Session %s: lead sink raised unexpectedly", self.session_id)
            error = SINK_FAILURE_MESSAGE

        if generation != self._generation:
            logger.warning(
                "Session %s: reset during submission; discarding its outcome",
                self.session_id,
            )
            return self._outcome(self.submit_error)

        if error is None:
            self._submission = SubmissionState.REVEALED
            logger.info(
                "Session %s: lead saved, revealing planet %s",
                self.session_id, result.outcome.id,
            )
        else:
            self._submission = SubmissionState.IDLE
            self.submit_error = error
        self._touch()
        return self._outcome(error)

    def _outcome(self, error: str | None = None) -> SubmissionOutcome:
        return SubmissionOutcome(
            state=self._submission,
            revealed=self.revealed,
            error=None if self.revealed else error,
        )

    # ==================================================================
    # Snapshot
    # ==================================================================

    def snapshot(self) -> SessionState:
        """Public view of the session for API consumers."""
        return SessionState(
            session_id=self.session_id,
            position=self._position,
            total=self.total,
            progress=self.progress(),
            current_question=self.current_question,
            can_proceed=self.can_proceed(),
            completed=self._completed,
            answered=[q.id for i, q in enumerate(self._questions) if self.is_answered(i)],
            contact_email=self.contact_email,
            contact_phone=self.contact_phone,
            submission=self._submission,
            submit_error=self.submit_error,
            revealed=self.revealed,
        )

    def _touch(self) -> None:
        self.last_active = self._clock()

"""Quiz session endpoints — create a session, answer, navigate, submit, reveal.

Every mutating endpoint returns the session snapshot so the UI can render
the next screen from a single response.  Navigation that is refused
(unanswered question) is not an error: the snapshot simply shows the same
position with ``can_proceed=false``.
"""

from typing import Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from compass_quiz.models.question import QuizQuestion
from compass_quiz.models.result import FormattedResult
from compass_quiz.models.session import SessionState, SubmissionOutcome

from compass_server.dependencies import get_client_info, get_registry
from compass_server.registry import SessionRegistry

router = APIRouter(prefix="/quiz", tags=["quiz"])


# ------------------------------------------------------------------
# Request / response models
# ------------------------------------------------------------------

class AnswerRequest(BaseModel):
    """Body for PUT /quiz/sessions/{sid}/answers/{qid}.

    ``value`` is either a bare value (score int, tag, year, category code)
    or a tagged answer dict such as ``{"kind": "tag", "tag": "fire"}``.
    """
    value: Any


class ContactRequest(BaseModel):
    email: str = ""
    phone: str = ""


class SubmitResponse(SubmissionOutcome):
    """Submission outcome plus the formatted result once revealed."""
    result: FormattedResult | None = None


# ------------------------------------------------------------------
# Session lifecycle
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def create_session(
    registry: SessionRegistry = Depends(get_registry),
    client_info: str = Depends(get_client_info),
) -> SessionState:
    """Start a new quiz with a freshly shuffled question set."""
    return registry.create(client_info=client_info).snapshot()


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    return registry.get(session_id).snapshot()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    registry.discard(session_id)
    return Response(status_code=204)


@router.get("/sessions/{session_id}/questions")
async def list_questions(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> list[QuizQuestion]:
    """The full question sequence in display order (options already shuffled)."""
    return registry.get(session_id).get_questions()


# ------------------------------------------------------------------
# Answers & navigation
# ------------------------------------------------------------------

@router.put("/sessions/{session_id}/answers/{question_id}")
async def select_answer(
    session_id: str,
    question_id: str,
    body: AnswerRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = registry.get(session_id)
    session.select_answer(question_id, body.value)
    return session.snapshot()


@router.post("/sessions/{session_id}/next")
async def go_next(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = registry.get(session_id)
    session.go_next()
    return session.snapshot()


@router.post("/sessions/{session_id}/back")
async def go_back(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = registry.get(session_id)
    session.go_back()
    return session.snapshot()


@router.post("/sessions/{session_id}/finish")
async def finish(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = registry.get(session_id)
    session.finish()
    return session.snapshot()


@router.post("/sessions/{session_id}/reset")
async def reset(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = registry.get(session_id)
    session.reset()
    return session.snapshot()


# ------------------------------------------------------------------
# Contact capture & reveal
# ------------------------------------------------------------------

@router.put("/sessions/{session_id}/contact")
async def set_contact(
    session_id: str,
    body: ContactRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    session = registry.get(session_id)
    session.set_contact_email(body.email)
    session.set_contact_phone(body.phone)
    return session.snapshot()


@router.post("/sessions/{session_id}/submit")
async def submit_and_reveal(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SubmitResponse:
    """Save the lead and, on success, return the revealed result.

    A failed save is reported in ``error`` with HTTP 200; the session
    keeps its answers and contact details so the client can retry.
    """
    session = registry.get(session_id)
    outcome = await session.submit_and_reveal()
    result = session.formatted_result() if outcome.revealed else None
    return SubmitResponse(**outcome.model_dump(), result=result)


@router.get("/sessions/{session_id}/result")
async def get_result(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> FormattedResult:
    """The formatted result, available only after a successful submit."""
    session = registry.get(session_id)
    formatted = session.formatted_result()
    if not session.revealed:
        raise ValueError(
            f"Result only available after contact submission: session_id={session_id}"
        )
    return formatted

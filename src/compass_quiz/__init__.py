"""compass_quiz — Cosmic Compass screening quiz engine.

Public API:
    CatalogStore      — loads the YAML question catalog into typed models
    build_sequence    — per-session question list with shuffled planet options
    QuizSession       — navigation state machine and lead-gated reveal
    process           — scores a completed answer map into a QuizResult
    format_result     — adds display text (band label, description, referral)

Lead handling:
    LeadSink          — ABC for the persistence collaborator
    WebhookLeadSink   — LeadSink that POSTs payloads to an HTTP endpoint
    is_valid_contact  — email-or-phone check gating submission
    build_payload     — builds the immutable LeadPayload

Errors:
    CatalogError      — inconsistent catalog (fatal, broken build)
    LeadSinkError     — persistence failure with a user-facing message
"""

from compass_quiz.catalog import CatalogStore, build_sequence
from compass_quiz.errors import CatalogError, LeadSinkError
from compass_quiz.interfaces import LeadSink
from compass_quiz.leads import build_payload, is_valid_contact, is_valid_email, is_valid_phone
from compass_quiz.models.lead import LeadPayload
from compass_quiz.models.result import FormattedResult, QuizResult
from compass_quiz.models.session import SessionState, SubmissionOutcome, SubmissionState
from compass_quiz.scoring import format_result, process
from compass_quiz.session import QuizSession
from compass_quiz.webhook import WebhookLeadSink

__all__ = [
    # Catalog & session
    "CatalogStore",
    "build_sequence",
    "QuizSession",
    "SessionState",
    # Scoring
    "process",
    "format_result",
    "QuizResult",
    "FormattedResult",
    # Leads
    "LeadSink",
    "WebhookLeadSink",
    "LeadPayload",
    "SubmissionOutcome",
    "SubmissionState",
    "build_payload",
    "is_valid_contact",
    "is_valid_email",
    "is_valid_phone",
    # Errors
    "CatalogError",
    "LeadSinkError",
]

"""Public model re-exports for compass_quiz.

Consumers should import from ``compass_quiz.models`` rather than
reaching into sub-modules directly.
"""

# --- Questions ---
from compass_quiz.models.question import QuestionType, QuizOption, QuizQuestion

# --- Answers ---
from compass_quiz.models.answer import (
    Answer,
    CategoryAnswer,
    QuizAnswers,
    ScoreAnswer,
    TagAnswer,
    YearAnswer,
    coerce_answer,
    dump_answers,
)

# --- Catalog ---
from compass_quiz.models.catalog import (
    CategoryCode,
    OutcomeAssignment,
    QuizCatalog,
    ReferralRoute,
    SeverityBandDef,
)

# --- Results ---
from compass_quiz.models.result import FormattedResult, QuizResult

# --- Leads ---
from compass_quiz.models.lead import LeadContact, LeadMeta, LeadPayload, LeadQuiz

# --- Session ---
from compass_quiz.models.session import (
    SessionState,
    SubmissionOutcome,
    SubmissionState,
)

__all__ = [
    # Questions
    "QuestionType",
    "QuizOption",
    "QuizQuestion",
    # Answers
    "Answer",
    "CategoryAnswer",
    "QuizAnswers",
    "ScoreAnswer",
    "TagAnswer",
    "YearAnswer",
    "coerce_answer",
    "dump_answers",
    # Catalog
    "CategoryCode",
    "OutcomeAssignment",
    "QuizCatalog",
    "ReferralRoute",
    "SeverityBandDef",
    # Results
    "FormattedResult",
    "QuizResult",
    # Leads
    "LeadContact",
    "LeadMeta",
    "LeadPayload",
    "LeadQuiz",
    # Session
    "SessionState",
    "SubmissionOutcome",
    "SubmissionState",
]

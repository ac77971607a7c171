from functools import lru_cache

from fastapi import HTTPException

from quizify.agents.explanation_agent import ExplanationAgent
from quizify.core.exceptions import (
    AnswerValidationError,
    CurationError,
    ElaborationError,
    EmptyQuestionBankError,
    LLMServiceError,
    MalformedResponseError,
    NoContentGeneratedError,
    PDFExtractionError,
    PersistenceError,
    QuizifyError,
    QuizNotFoundError,
    SessionBusyError,
    SessionNotFoundError,
    SessionStateError,
)
from quizify.db.database import SessionLocal
from quizify.db.store import QuizStore, SQLAlchemyQuizStore
from quizify.services.ingestion_job_service import IngestionJobService
from quizify.services.progress_service import ProgressService
from quizify.services.question_bank_service import QuestionBankService
from quizify.services.quiz_pipeline_service import QuizPipelineService
from quizify.services.session_service import SessionService


@lru_cache()
def get_store() -> QuizStore:
    return SQLAlchemyQuizStore(SessionLocal)


@lru_cache()
def get_question_bank() -> QuestionBankService:
    return QuestionBankService(get_store())


@lru_cache()
def get_job_service() -> IngestionJobService:
    return IngestionJobService(lambda: QuizPipelineService(get_store()))


@lru_cache()
def get_session_service() -> SessionService:
    return SessionService(get_store(), get_question_bank(), elaborator=ExplanationAgent())


def get_progress_service() -> ProgressService:
    return ProgressService(get_store())


# Most specific classes first
_STATUS_CODES = (
    (QuizNotFoundError, 404),
    (SessionNotFoundError, 404),
    (EmptyQuestionBankError, 404),
    (SessionBusyError, 409),
    (AnswerValidationError, 400),
    (SessionStateError, 409),
    (PDFExtractionError, 422),
    (NoContentGeneratedError, 422),
    (ElaborationError, 502),
    (CurationError, 502),
    (MalformedResponseError, 502),
    (LLMServiceError, 503),
    (PersistenceError, 503),
)


def to_http_exception(error: QuizifyError) -> HTTPException:
    """Translate an application error into the HTTP error returned to clients"""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))

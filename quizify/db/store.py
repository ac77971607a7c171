"""Quiz and attempt persistence behind a small interface.

Services receive a ``QuizStore`` instead of touching the database directly, so
they can run against the SQLAlchemy store in the app and an in-memory store in
tests.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from quizify.core.exceptions import PersistenceError, QuizNotFoundError
from quizify.db import models
from quizify.db.crud import QuizCRUD, AttemptCRUD
from quizify.schemas.quiz_schema import Quiz, QuizCreate
from quizify.schemas.attempt_schema import QuizAttempt, AttemptCreate

logger = logging.getLogger(__name__)


class QuizStore(ABC):
    @abstractmethod
    def create_quiz(self, quiz: QuizCreate) -> Quiz: ...

    @abstractmethod
    def get_quizzes(self) -> List[Quiz]:
        """All quizzes, newest first, without their PDF bytes"""

    @abstractmethod
    def get_quiz_by_id(self, quiz_id: str, include_pdf: bool = False) -> Optional[Quiz]: ...

    @abstractmethod
    def rename_quiz(self, quiz_id: str, name: str) -> Quiz: ...

    @abstractmethod
    def delete_quiz(self, quiz_id: str) -> bool:
        """Delete a quiz and every attempt made on it"""

    @abstractmethod
    def create_attempt(self, attempt: AttemptCreate) -> QuizAttempt: ...

    @abstractmethod
    def get_attempts_for_quiz(self, quiz_id: str) -> List[QuizAttempt]: ...

    @abstractmethod
    def get_latest_attempt_for_quiz(self, quiz_id: str) -> Optional[QuizAttempt]: ...

    @abstractmethod
    def get_all_attempts(self) -> List[QuizAttempt]: ...

    @abstractmethod
    def list_distinct_subjects(self) -> List[str]: ...


def _to_quiz(db_quiz: models.Quiz, include_pdf: bool = False) -> Quiz:
    return Quiz(
        id=db_quiz.id,
        subject=db_quiz.subject,
        name=db_quiz.name,
        mcqs=db_quiz.mcqs or [],
        created_at=db_quiz.created_at,
        pdf_name=db_quiz.pdf_name,
        notes=db_quiz.notes,
        pdf_data=db_quiz.pdf_data if include_pdf else None,
    )


class SQLAlchemyQuizStore(QuizStore):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _run(self, operation: str, func):
        """Run ``func(db)`` in a fresh session, wrapping database errors"""
        with self.session_factory() as db:
            try:
                return func(db)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Database error during {operation}: {e}")
                raise PersistenceError(f"Database error during {operation}: {e}") from e

    def create_quiz(self, quiz: QuizCreate) -> Quiz:
        def _create(db):
            db_quiz = QuizCRUD.create_quiz(db, {
                "subject": quiz.subject,
                "name": quiz.name,
                "mcqs": [mcq.model_dump(mode="json") for mcq in quiz.mcqs],
                "pdf_name": quiz.pdf_name,
                "notes": quiz.notes,
                "pdf_data": quiz.pdf_data,
            })
            logger.info(f"Created quiz {db_quiz.id} with {len(quiz.mcqs)} questions")
            return _to_quiz(db_quiz)

        return self._run("create_quiz", _create)

    def get_quizzes(self) -> List[Quiz]:
        return self._run(
            "get_quizzes",
            lambda db: [_to_quiz(q) for q in QuizCRUD.get_quizzes(db)]
        )

    def get_quiz_by_id(self, quiz_id: str, include_pdf: bool = False) -> Optional[Quiz]:
        def _get(db):
            db_quiz = QuizCRUD.get_quiz(db, quiz_id)
            return _to_quiz(db_quiz, include_pdf) if db_quiz else None

        return self._run("get_quiz_by_id", _get)

    def rename_quiz(self, quiz_id: str, name: str) -> Quiz:
        def _rename(db):
            db_quiz = QuizCRUD.update_quiz(db, quiz_id, {"name": name})
            if not db_quiz:
                raise QuizNotFoundError(f"Quiz {quiz_id} not found")
            return _to_quiz(db_quiz)

        return self._run("rename_quiz", _rename)

    def delete_quiz(self, quiz_id: str) -> bool:
        deleted = self._run("delete_quiz", lambda db: QuizCRUD.delete_quiz(db, quiz_id))
        if deleted:
            logger.info(f"Deleted quiz {quiz_id} and its attempts")
        return deleted

    def create_attempt(self, attempt: AttemptCreate) -> QuizAttempt:
        def _create(db):
            if not QuizCRUD.get_quiz(db, attempt.quiz_id):
                raise QuizNotFoundError(f"Quiz {attempt.quiz_id} not found")
            db_attempt = AttemptCRUD.create_attempt(db, attempt.model_dump())
            return QuizAttempt.model_validate(db_attempt)

        return self._run("create_attempt", _create)

    def get_attempts_for_quiz(self, quiz_id: str) -> List[QuizAttempt]:
        return self._run(
            "get_attempts_for_quiz",
            lambda db: [QuizAttempt.model_validate(a) for a in AttemptCRUD.get_attempts_by_quiz(db, quiz_id)]
        )

    def get_latest_attempt_for_quiz(self, quiz_id: str) -> Optional[QuizAttempt]:
        def _latest(db):
            db_attempt = AttemptCRUD.get_latest_attempt(db, quiz_id)
            return QuizAttempt.model_validate(db_attempt) if db_attempt else None

        return self._run("get_latest_attempt_for_quiz", _latest)

    def get_all_attempts(self) -> List[QuizAttempt]:
        return self._run(
            "get_all_attempts",
            lambda db: [QuizAttempt.model_validate(a) for a in AttemptCRUD.get_all_attempts(db)]
        )

    def list_distinct_subjects(self) -> List[str]:
        return self._run("list_distinct_subjects", QuizCRUD.get_distinct_subjects)

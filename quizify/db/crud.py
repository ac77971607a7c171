from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import desc
from datetime import datetime

from quizify.db.models import Quiz, QuizAttempt


# Quiz CRUD operations
class QuizCRUD:
    @staticmethod
    def get_quiz(db: Session, quiz_id: str) -> Optional[Quiz]:
        return db.query(Quiz).filter(Quiz.id == quiz_id).first()

    @staticmethod
    def get_quizzes(
        db: Session,
        skip: int = 0,
        limit: Optional[int] = None,
        subject: Optional[str] = None
    ) -> List[Quiz]:
        query = db.query(Quiz)

        if subject:
            query = query.filter(Quiz.subject == subject)

        query = query.order_by(desc(Quiz.created_at)).offset(skip)
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def create_quiz(db: Session, quiz_data: Dict[str, Any]) -> Quiz:
        quiz_data.setdefault("created_at", datetime.utcnow())
        db_quiz = Quiz(**quiz_data)
        db.add(db_quiz)
        db.commit()
        db.refresh(db_quiz)
        return db_quiz

    @staticmethod
    def update_quiz(db: Session, quiz_id: str, update_data: Dict[str, Any]) -> Optional[Quiz]:
        db_quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if db_quiz:
            for key, value in update_data.items():
                setattr(db_quiz, key, value)
            db.commit()
            db.refresh(db_quiz)
        return db_quiz

    @staticmethod
    def delete_quiz(db: Session, quiz_id: str) -> bool:
        db_quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if db_quiz:
            db.delete(db_quiz)
            db.commit()
            return True
        return False

    @staticmethod
    def get_distinct_subjects(db: Session) -> List[str]:
        rows = db.query(Quiz.subject).distinct().order_by(Quiz.subject).all()
        return [row[0] for row in rows]


# Attempt CRUD operations
class AttemptCRUD:
    @staticmethod
    def create_attempt(db: Session, attempt_data: Dict[str, Any]) -> QuizAttempt:
        attempt_data.setdefault("completed_at", datetime.utcnow())
        db_attempt = QuizAttempt(**attempt_data)
        db.add(db_attempt)
        db.commit()
        db.refresh(db_attempt)
        return db_attempt

    @staticmethod
    def get_attempts_by_quiz(db: Session, quiz_id: str) -> List[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.completed_at)
            .all()
        )

    @staticmethod
    def get_latest_attempt(db: Session, quiz_id: str) -> Optional[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.quiz_id == quiz_id)
            .order_by(desc(QuizAttempt.completed_at))
            .first()
        )

    @staticmethod
    def get_all_attempts(db: Session) -> List[QuizAttempt]:
        return db.query(QuizAttempt).order_by(QuizAttempt.completed_at).all()

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, LargeBinary
from sqlalchemy.orm import relationship, deferred
from sqlalchemy.sql import func
import uuid

from quizify.db.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    subject = Column(String(100), nullable=False, index=True)
    name = Column(String(200))  # User-editable display name

    # Questions: [{"question", "options", "correct_answer_index", "explanation"}, ...]
    mcqs = Column(JSON, nullable=False, default=list)

    # Source document
    pdf_name = Column(String(255))
    notes = Column(Text)  # Joined per-page notes
    pdf_data = deferred(Column(LargeBinary))  # Loaded only when the document is requested

    # Timestamps
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    attempts = relationship(
        "QuizAttempt",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True
    )


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(String(36), primary_key=True, default=_new_id, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)

    # One slot per question: selected option index or null
    answers = Column(JSON, nullable=False, default=list)
    score = Column(Integer, nullable=False, default=0)  # Count of correct answers
    total_questions = Column(Integer, nullable=False, default=0)

    # Timestamps
    completed_at = Column(DateTime, default=func.now(), nullable=False, index=True)

    # Relationships
    quiz = relationship("Quiz", back_populates="attempts")

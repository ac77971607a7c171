from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from enum import Enum

from quizify.schemas.attempt_schema import QuizAttempt


class SlotState(str, Enum):
    UNANSWERED = "unanswered"
    SELECTED = "selected"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class SessionCreate(BaseModel):
    quiz_id: Optional[str] = None
    quick_quiz: bool = False
    count: Optional[int] = Field(None, gt=0)
    resume_latest: bool = False

    @model_validator(mode="after")
    def one_source(self):
        if bool(self.quiz_id) == self.quick_quiz:
            raise ValueError("provide either quiz_id or quick_quiz=true")
        return self


class OptionSelect(BaseModel):
    option_index: int = Field(..., ge=0)


class QuestionView(BaseModel):
    index: int
    question: str
    options: List[str]
    state: SlotState
    selected_index: Optional[int] = None
    correct_answer_index: Optional[int] = None
    explanation: Optional[str] = None
    explanation_elaborated: bool = False
    explanation_html: Optional[str] = None


class SessionView(BaseModel):
    session_id: str
    quiz_id: str
    subject: str
    total_questions: int
    current_index: int
    answered_count: int
    progress_percent: float
    finished: bool
    busy: bool
    slot_states: List[SlotState]
    question: Optional[QuestionView] = None
    attempt: Optional[QuizAttempt] = None

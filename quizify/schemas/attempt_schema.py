from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime


class AttemptCreate(BaseModel):
    quiz_id: str
    answers: List[Optional[int]]
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)

    @model_validator(mode="after")
    def consistent_totals(self):
        if len(self.answers) != self.total_questions:
            raise ValueError("answers must have one slot per question")
        if self.score > self.total_questions:
            raise ValueError("score cannot exceed total_questions")
        return self


class QuizAttempt(BaseModel):
    id: str
    quiz_id: str
    answers: List[Optional[int]]
    score: int
    total_questions: int
    completed_at: datetime
    persisted: bool = True

    class Config:
        from_attributes = True

    @property
    def percentage(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return round(self.score / self.total_questions * 100, 1)

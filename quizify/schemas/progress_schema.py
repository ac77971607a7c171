from pydantic import BaseModel, Field
from typing import List


class SubjectProgress(BaseModel):
    subject: str
    quizzes_taken: int
    average_score: int  # percentage, rounded
    total_correct: int
    total_attempted_questions: int


class ProgressOverview(BaseModel):
    total_quizzes_created: int
    total_attempts_made: int
    overall_average_score: int  # percentage, rounded
    subjects: List[SubjectProgress] = Field(default_factory=list)

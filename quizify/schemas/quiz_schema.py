from pydantic import BaseModel, Field, AliasChoices, field_validator, model_validator
from typing import Optional, List, Tuple
from datetime import datetime
import base64

OPTIONS_PER_MCQ = 4


class Mcq(BaseModel):
    """One multiple-choice question. Immutable once created."""
    question: str = Field(..., min_length=1)
    options: Tuple[str, ...]
    correct_answer_index: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("correct_answer_index", "correctAnswerIndex"),
    )
    explanation: str = Field(..., min_length=1)

    class Config:
        frozen = True

    @field_validator("question", "explanation")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("options")
    @classmethod
    def four_options(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(value) != OPTIONS_PER_MCQ:
            raise ValueError(f"exactly {OPTIONS_PER_MCQ} options are required, got {len(value)}")
        if any(not opt.strip() for opt in value):
            raise ValueError("options must not be blank")
        return value

    @model_validator(mode="after")
    def answer_in_range(self):
        if self.correct_answer_index >= len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} is out of range "
                f"for {len(self.options)} options"
            )
        return self

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer_index]


class QuizCreate(BaseModel):
    subject: str = Field(..., max_length=100)
    mcqs: List[Mcq] = Field(..., min_length=1)
    name: Optional[str] = Field(None, max_length=200)
    pdf_name: Optional[str] = None
    notes: Optional[str] = None
    pdf_data: Optional[bytes] = Field(None, repr=False)


class Quiz(BaseModel):
    id: str
    subject: str
    name: Optional[str] = None
    mcqs: List[Mcq]
    created_at: datetime
    pdf_name: Optional[str] = None
    notes: Optional[str] = None
    pdf_data: Optional[bytes] = Field(None, exclude=True, repr=False)
    is_ephemeral: bool = False

    class Config:
        from_attributes = True

    @property
    def display_name(self) -> str:
        return self.name or self.pdf_name or self.subject

    @property
    def question_count(self) -> int:
        return len(self.mcqs)

    def pdf_data_uri(self) -> Optional[str]:
        if not self.pdf_data:
            return None
        encoded = base64.b64encode(self.pdf_data).decode("ascii")
        return f"data:application/pdf;base64,{encoded}"


class QuizResponse(BaseModel):
    id: str
    subject: str
    name: str
    mcqs: List[Mcq]
    created_at: datetime
    pdf_name: Optional[str] = None
    has_notes: bool = False
    has_pdf: bool = False
    is_ephemeral: bool = False

    @classmethod
    def from_quiz(cls, quiz: Quiz) -> "QuizResponse":
        return cls(
            id=quiz.id,
            subject=quiz.subject,
            name=quiz.display_name,
            mcqs=quiz.mcqs,
            created_at=quiz.created_at,
            pdf_name=quiz.pdf_name,
            has_notes=bool(quiz.notes and quiz.notes.strip()),
            has_pdf=bool(quiz.pdf_data),
            is_ephemeral=quiz.is_ephemeral,
        )


class QuizSummary(BaseModel):
    id: str
    subject: str
    name: str
    pdf_name: Optional[str] = None
    question_count: int
    created_at: datetime
    latest_score: Optional[int] = None
    latest_total: Optional[int] = None
    latest_completed_at: Optional[datetime] = None


class SubjectGroup(BaseModel):
    subject: str
    quizzes: List[QuizSummary]


class QuizRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class NotesResponse(BaseModel):
    quiz_id: str
    format: str
    content: str


class QuickQuizResponse(BaseModel):
    quiz: QuizResponse
    total_available: int
    selected_count: int
    session_id: Optional[str] = None

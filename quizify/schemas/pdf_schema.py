from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class PageIssueKind(str, Enum):
    SKIPPED = "skipped"
    FAILED = "failed"


class PageIssue(BaseModel):
    page_number: int
    kind: PageIssueKind
    reason: str

    def describe(self) -> str:
        if self.kind == PageIssueKind.SKIPPED:
            return f"Page {self.page_number}: skipped ({self.reason})"
        return f"Page {self.page_number}: {self.reason}"


class IngestionStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class IngestionJobResponse(BaseModel):
    job_id: str
    status: IngestionStatus
    subject: str
    pdf_name: Optional[str] = None
    pages_processed: int = 0
    total_pages: int = 0
    progress_percent: float = 0.0
    page_issues: List[PageIssue] = Field(default_factory=list)
    quiz_id: Optional[str] = None
    question_count: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    finished_at: Optional[datetime] = None

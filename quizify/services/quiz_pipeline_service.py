import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from quizify.agents.question_agent import QuestionAgent
from quizify.core.content_classifier import ContentClassifier
from quizify.core.exceptions import (
    NoContentGeneratedError,
    PageGenerationError,
    PDFExtractionError,
    QuizifyError,
)
from quizify.core.pdf_ingestion import PDFIngestion
from quizify.db.store import QuizStore
from quizify.schemas.pdf_schema import PageIssue, PageIssueKind
from quizify.schemas.quiz_schema import Mcq, Quiz, QuizCreate
from quizify.utils.helpers import summarize_messages
from quizify.utils.logger import log_ingestion, log_quiz_event

logger = logging.getLogger(__name__)

NOTES_DIVIDER = "\n\n---\n\n"

ProgressCallback = Callable[[int, int], None]


@dataclass
class IngestionResult:
    quiz: Quiz
    page_issues: List[PageIssue] = field(default_factory=list)

    @property
    def failed_pages(self) -> List[PageIssue]:
        return [issue for issue in self.page_issues if issue.kind == PageIssueKind.FAILED]

    @property
    def skipped_pages(self) -> List[PageIssue]:
        return [issue for issue in self.page_issues if issue.kind == PageIssueKind.SKIPPED]

    def summary(self) -> str:
        """User-facing notice describing what was generated and which pages had issues"""
        message = f"Quiz generated with {self.quiz.question_count} questions."
        if not self.page_issues:
            return message

        lines = summarize_messages([issue.describe() for issue in self.page_issues])
        return (
            f"{message} Some pages had issues ({len(self.page_issues)}):\n"
            + "\n".join(lines)
        )


class QuizPipelineService:
    """
    Turns an uploaded PDF into one stored quiz.

    Pages are processed strictly one after another. A page that is skipped or
    whose generation fails is recorded and the loop carries on; the quiz is only
    written once the loop is over, and only if at least one page produced
    questions.
    """

    def __init__(
        self,
        store: QuizStore,
        question_agent: Optional[QuestionAgent] = None,
        classifier: Optional[ContentClassifier] = None,
        pdf_ingestion: Optional[PDFIngestion] = None
    ):
        self.store = store
        self.question_agent = question_agent or QuestionAgent()
        self.classifier = classifier or ContentClassifier()
        self.pdf_ingestion = pdf_ingestion or PDFIngestion()

    def ingest(
        self,
        pdf_bytes: bytes,
        subject: str,
        pdf_name: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> IngestionResult:
        """
        Generate and persist a quiz for a PDF

        Args:
            pdf_bytes: Raw PDF content
            subject: Subject the questions should focus on
            pdf_name: Original file name
            progress_callback: Called with (pages_processed, total_pages) after every page

        Returns:
            IngestionResult with the stored quiz and every page-level issue

        Raises:
            PDFExtractionError: The PDF could not be opened
            NoContentGeneratedError: No page produced any question
            PersistenceError: The quiz could not be saved
        """
        log_ingestion("extraction", "started", pdf_name=pdf_name, subject=subject)

        mcqs: List[Mcq] = []
        notes: List[str] = []
        page_issues: List[PageIssue] = []

        with self.pdf_ingestion.open_document(pdf_bytes) as document:
            total_pages = document.page_count
            log_ingestion(
                "extraction", "completed",
                total_pages=total_pages,
                extraction_method=document.extraction_method
            )

            for page_number in range(1, total_pages + 1):
                try:
                    page_text = document.extract_page_text(page_number)
                except PDFExtractionError as e:
                    page_issues.append(PageIssue(
                        page_number=page_number,
                        kind=PageIssueKind.FAILED,
                        reason=f"text extraction failed: {e}"
                    ))
                    log_ingestion("page", "failed", page_number=page_number, error=str(e))
                else:
                    self._process_page(
                        page_text, subject, page_number, total_pages,
                        mcqs, notes, page_issues
                    )

                if progress_callback:
                    progress_callback(page_number, total_pages)

        if not mcqs:
            log_ingestion("generation", "failed", pdf_name=pdf_name, page_issues=len(page_issues))
            raise NoContentGeneratedError(page_issues=page_issues)

        quiz = self.store.create_quiz(QuizCreate(
            subject=subject,
            name=pdf_name[:200] if pdf_name else None,
            mcqs=mcqs,
            pdf_name=pdf_name,
            notes=NOTES_DIVIDER.join(notes) if notes else None,
            pdf_data=pdf_bytes
        ))

        log_quiz_event(
            quiz.id, "ingestion", "completed",
            question_count=len(mcqs),
            total_pages=total_pages,
            failed_pages=sum(1 for i in page_issues if i.kind == PageIssueKind.FAILED),
            skipped_pages=sum(1 for i in page_issues if i.kind == PageIssueKind.SKIPPED)
        )
        return IngestionResult(quiz=quiz, page_issues=page_issues)

    def _process_page(
        self,
        page_text: str,
        subject: str,
        page_number: int,
        total_pages: int,
        mcqs: List[Mcq],
        notes: List[str],
        page_issues: List[PageIssue]
    ):
        classification = self.classifier.classify(page_text, page_number, total_pages)
        if classification.skip:
            page_issues.append(PageIssue(
                page_number=page_number,
                kind=PageIssueKind.SKIPPED,
                reason=classification.reason
            ))
            log_ingestion("page", "skipped", page_number=page_number, reason=classification.reason)
            return

        try:
            output = self._generate_page(page_text, subject, page_number, total_pages)
        except PageGenerationError as e:
            page_issues.append(PageIssue(
                page_number=page_number,
                kind=PageIssueKind.FAILED,
                reason=e.reason
            ))
            log_ingestion("page", "failed", page_number=page_number, error=e.reason)
            return

        mcqs.extend(output.mcqs)
        if output.page_notes and output.page_notes.strip():
            notes.append(f"Page {page_number}\n\n{output.page_notes.strip()}")
        log_ingestion("page", "completed", page_number=page_number, question_count=len(output.mcqs))

    def _generate_page(self, page_text: str, subject: str, page_number: int, total_pages: int):
        try:
            return self.question_agent.generate_for_page(
                page_text=page_text,
                subject=subject,
                page_number=page_number,
                total_pages=total_pages
            )
        except QuizifyError as e:
            raise PageGenerationError(page_number, str(e)) from e


import threading
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from quizify.config.settings import settings
from quizify.core.exceptions import NoContentGeneratedError, QuizifyError
from quizify.schemas.pdf_schema import IngestionJobResponse, IngestionStatus, PageIssue
from quizify.services.quiz_pipeline_service import QuizPipelineService
from quizify.utils.helpers import calculate_percentage, generate_unique_id

logger = logging.getLogger(__name__)


@dataclass
class IngestionJob:
    job_id: str
    subject: str
    pdf_name: Optional[str]
    status: IngestionStatus = IngestionStatus.QUEUED
    pages_processed: int = 0
    total_pages: int = 0
    page_issues: List[PageIssue] = field(default_factory=list)
    quiz_id: Optional[str] = None
    question_count: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    def to_response(self) -> IngestionJobResponse:
        return IngestionJobResponse(
            job_id=self.job_id,
            status=self.status,
            subject=self.subject,
            pdf_name=self.pdf_name,
            pages_processed=self.pages_processed,
            total_pages=self.total_pages,
            progress_percent=calculate_percentage(self.pages_processed, self.total_pages),
            page_issues=list(self.page_issues),
            quiz_id=self.quiz_id,
            question_count=self.question_count,
            message=self.message,
            error=self.error,
            created_at=self.created_at,
            finished_at=self.finished_at,
        )


class IngestionJobService:
    """
    In-process registry of PDF ingestion jobs.

    Uploads return immediately with a job id; the pipeline runs as a background
    task and the job records its progress so clients can poll it. Finished jobs
    are kept for ``retention_minutes`` after they end, then dropped.
    """

    def __init__(
        self,
        pipeline_factory: Callable[[], QuizPipelineService],
        retention_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.pipeline_factory = pipeline_factory
        self.retention = timedelta(
            minutes=settings.FINISHED_JOB_RETENTION_MINUTES if retention_minutes is None else retention_minutes
        )
        self.clock = clock
        self._jobs: Dict[str, IngestionJob] = {}
        self._lock = threading.Lock()

    def create_job(self, subject: str, pdf_name: Optional[str] = None) -> IngestionJob:
        job = IngestionJob(
            job_id=generate_unique_id("ingestion"),
            subject=subject,
            pdf_name=pdf_name,
            created_at=self.clock()
        )
        with self._lock:
            self._evict_finished_locked()
            self._jobs[job.job_id] = job
        logger.info(f"Queued ingestion job {job.job_id} for {pdf_name or 'unnamed PDF'}")
        return job

    def _evict_finished_locked(self):
        now = self.clock()
        expired = [
            job_id for job_id, job in self._jobs.items()
            if job.finished_at is not None and now - job.finished_at > self.retention
        ]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.info(f"Dropped {len(expired)} finished ingestion job(s)")

    def get_job(self, job_id: str) -> Optional[IngestionJobResponse]:
        with self._lock:
            self._evict_finished_locked()
            job = self._jobs.get(job_id)
            return job.to_response() if job else None

    def _update(self, job_id: str, **changes):
        with self._lock:
            job = self._jobs[job_id]
            for key, value in changes.items():
                setattr(job, key, value)

    def run_job(self, job_id: str, pdf_bytes: bytes):
        """Run the pipeline for a queued job; never raises"""
        with self._lock:
            job = self._jobs[job_id]
            subject, pdf_name = job.subject, job.pdf_name

        self._update(job_id, status=IngestionStatus.PROCESSING)

        def on_progress(pages_processed: int, total_pages: int):
            self._update(job_id, pages_processed=pages_processed, total_pages=total_pages)

        try:
            pipeline = self.pipeline_factory()
            result = pipeline.ingest(
                pdf_bytes,
                subject=subject,
                pdf_name=pdf_name,
                progress_callback=on_progress
            )
        except NoContentGeneratedError as e:
            logger.warning(f"Ingestion job {job_id} produced no questions")
            self._update(
                job_id,
                status=IngestionStatus.FAILED,
                page_issues=e.page_issues,
                error=str(e),
                finished_at=self.clock()
            )
        except QuizifyError as e:
            logger.error(f"Ingestion job {job_id} failed: {e}")
            self._update(
                job_id,
                status=IngestionStatus.FAILED,
                error=str(e),
                finished_at=self.clock()
            )
        except Exception as e:
            logger.exception(f"Unexpected error in ingestion job {job_id}")
            self._update(
                job_id,
                status=IngestionStatus.FAILED,
                error=f"Unexpected error: {e}",
                finished_at=self.clock()
            )
        else:
            self._update(
                job_id,
                status=IngestionStatus.COMPLETED,
                page_issues=result.page_issues,
                quiz_id=result.quiz.id,
                question_count=result.quiz.question_count,
                message=result.summary(),
                finished_at=self.clock()
            )

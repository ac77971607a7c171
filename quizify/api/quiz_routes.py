from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from typing import List
import logging

from quizify.api.dependencies import (
    get_job_service,
    get_session_service,
    get_store,
    to_http_exception,
)
from quizify.config.settings import settings
from quizify.core.exceptions import QuizifyError
from quizify.core.pdf_ingestion import PDFIngestion
from quizify.db.store import QuizStore
from quizify.schemas.attempt_schema import QuizAttempt
from quizify.schemas.pdf_schema import IngestionJobResponse
from quizify.schemas.quiz_schema import (
    NotesResponse,
    Quiz,
    QuizRename,
    QuizResponse,
    QuizSummary,
    SubjectGroup,
)
from quizify.services.ingestion_job_service import IngestionJobService
from quizify.services.session_service import SessionService
from quizify.utils.helpers import sanitize_filename
from quizify.utils.logger import log_quiz_event
from quizify.utils.text_formatter import text_formatter

logger = logging.getLogger(__name__)

router = APIRouter()


def _summarize(store: QuizStore, quiz: Quiz) -> QuizSummary:
    latest = store.get_latest_attempt_for_quiz(quiz.id)
    return QuizSummary(
        id=quiz.id,
        subject=quiz.subject,
        name=quiz.display_name,
        pdf_name=quiz.pdf_name,
        question_count=quiz.question_count,
        created_at=quiz.created_at,
        latest_score=latest.score if latest else None,
        latest_total=latest.total_questions if latest else None,
        latest_completed_at=latest.completed_at if latest else None,
    )


def _load_quiz(store: QuizStore, quiz_id: str, include_pdf: bool = False) -> Quiz:
    try:
        quiz = store.get_quiz_by_id(quiz_id, include_pdf=include_pdf)
    except QuizifyError as e:
        raise to_http_exception(e)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz


@router.post("/quizzes/upload", response_model=IngestionJobResponse, status_code=202)
async def upload_pdf(
    background_tasks: BackgroundTasks,
    subject: str = Form(...),
    file: UploadFile = File(...),
    job_service: IngestionJobService = Depends(get_job_service)
):
    """Upload a PDF and start generating a quiz from it"""
    subject = subject.strip()
    if not settings.SUBJECT_MIN_LENGTH <= len(subject) <= settings.SUBJECT_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Subject must be between {settings.SUBJECT_MIN_LENGTH} and "
                f"{settings.SUBJECT_MAX_LENGTH} characters"
            )
        )

    if file.content_type and file.content_type not in ("application/pdf", "application/octet-stream"):
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    filename = sanitize_filename(file.filename)
    pdf_bytes = await file.read()

    is_valid, issues = PDFIngestion().validate_pdf(pdf_bytes, filename)
    if not is_valid:
        raise HTTPException(status_code=400, detail="; ".join(issues))

    job = job_service.create_job(subject=subject, pdf_name=filename)
    background_tasks.add_task(job_service.run_job, job.job_id, pdf_bytes)

    return job.to_response()


@router.get("/ingestions/{job_id}", response_model=IngestionJobResponse)
async def get_ingestion(
    job_id: str,
    job_service: IngestionJobService = Depends(get_job_service)
):
    """Poll the progress of an upload"""
    job = job_service.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Ingestion job not found")
    return job


@router.get("/quizzes", response_model=List[QuizSummary])
async def list_quizzes(store: QuizStore = Depends(get_store)):
    """List all quizzes, newest first"""
    try:
        return [_summarize(store, quiz) for quiz in store.get_quizzes()]
    except QuizifyError as e:
        raise to_http_exception(e)


@router.get("/quizzes/by-subject", response_model=List[SubjectGroup])
async def list_quizzes_by_subject(store: QuizStore = Depends(get_store)):
    """List quizzes grouped by subject, subjects in alphabetical order"""
    try:
        groups = {}
        for quiz in store.get_quizzes():
            groups.setdefault(quiz.subject, []).append(_summarize(store, quiz))
    except QuizifyError as e:
        raise to_http_exception(e)

    return [
        SubjectGroup(subject=subject, quizzes=groups[subject])
        for subject in sorted(groups, key=str.lower)
    ]


@router.get("/quizzes/subjects", response_model=List[str])
async def list_subjects(store: QuizStore = Depends(get_store)):
    try:
        return store.list_distinct_subjects()
    except QuizifyError as e:
        raise to_http_exception(e)


@router.get("/quizzes/{quiz_id}", response_model=QuizResponse)
async def get_quiz(quiz_id: str, store: QuizStore = Depends(get_store)):
    quiz = _load_quiz(store, quiz_id, include_pdf=True)
    return QuizResponse.from_quiz(quiz)


@router.patch("/quizzes/{quiz_id}", response_model=QuizResponse)
async def rename_quiz(
    quiz_id: str,
    rename: QuizRename,
    store: QuizStore = Depends(get_store)
):
    """Rename a quiz"""
    try:
        quiz = store.rename_quiz(quiz_id, rename.name)
    except QuizifyError as e:
        raise to_http_exception(e)

    log_quiz_event(quiz.id, "rename", "completed", name=rename.name)
    return QuizResponse.from_quiz(quiz)


@router.delete("/quizzes/{quiz_id}")
async def delete_quiz(
    quiz_id: str,
    store: QuizStore = Depends(get_store),
    session_service: SessionService = Depends(get_session_service)
):
    """Delete a quiz and all of its attempts"""
    try:
        deleted = store.delete_quiz(quiz_id)
    except QuizifyError as e:
        raise to_http_exception(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Quiz not found")

    session_service.end_sessions_for_quiz(quiz_id)
    log_quiz_event(quiz_id, "delete", "completed")
    return {"message": "Quiz deleted"}


@router.get("/quizzes/{quiz_id}/notes", response_model=NotesResponse)
async def get_quiz_notes(
    quiz_id: str,
    format: str = Query("markdown", pattern="^(markdown|html)$"),
    store: QuizStore = Depends(get_store)
):
    """Study notes collected from every page that produced questions"""
    quiz = _load_quiz(store, quiz_id)
    if not quiz.notes or not quiz.notes.strip():
        raise HTTPException(status_code=404, detail="No notes available for this quiz")

    content = text_formatter.to_html(quiz.notes) if format == "html" else quiz.notes
    return NotesResponse(quiz_id=quiz.id, format=format, content=content)


@router.get("/quizzes/{quiz_id}/pdf")
async def get_quiz_pdf(
    quiz_id: str,
    as_data_uri: bool = False,
    store: QuizStore = Depends(get_store)
):
    """The original PDF, as a file or as a data URI"""
    quiz = _load_quiz(store, quiz_id, include_pdf=True)
    if not quiz.pdf_data:
        raise HTTPException(status_code=404, detail="PDF document not found for this quiz")

    if as_data_uri:
        return {"quiz_id": quiz.id, "pdf_name": quiz.pdf_name, "data_uri": quiz.pdf_data_uri()}

    filename = (quiz.pdf_name or "document.pdf").replace('"', "")
    return Response(
        content=quiz.pdf_data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'}
    )


@router.get("/quizzes/{quiz_id}/attempts", response_model=List[QuizAttempt])
async def list_attempts(quiz_id: str, store: QuizStore = Depends(get_store)):
    _load_quiz(store, quiz_id)
    try:
        return store.get_attempts_for_quiz(quiz_id)
    except QuizifyError as e:
        raise to_http_exception(e)


@router.get("/quizzes/{quiz_id}/attempts/latest", response_model=QuizAttempt)
async def get_latest_attempt(quiz_id: str, store: QuizStore = Depends(get_store)):
    _load_quiz(store, quiz_id)
    try:
        attempt = store.get_latest_attempt_for_quiz(quiz_id)
    except QuizifyError as e:
        raise to_http_exception(e)
    if not attempt:
        raise HTTPException(status_code=404, detail="No attempts for this quiz yet")
    return attempt

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from quizify.api.dependencies import get_question_bank, get_session_service, to_http_exception
from quizify.core.exceptions import QuizifyError
from quizify.core.quiz_session import QuizSession
from quizify.schemas.quiz_schema import QuickQuizResponse, QuizResponse
from quizify.schemas.session_schema import OptionSelect, SessionCreate, SessionView
from quizify.services.question_bank_service import QuestionBankService
from quizify.services.session_service import SessionService
from quizify.utils.text_formatter import text_formatter

logger = logging.getLogger(__name__)

router = APIRouter()


def _render(session: QuizSession) -> SessionView:
    view = session.view()
    if view.question and view.question.explanation:
        question = view.question.model_copy(
            update={"explanation_html": text_formatter.to_html(view.question.explanation)}
        )
        view = view.model_copy(update={"question": question})
    return view


def _act(session_service: SessionService, session_id: str, action) -> SessionView:
    """Look up a session, apply ``action`` to it and return the new view"""
    try:
        session = session_service.get(session_id)
        action(session)
    except QuizifyError as e:
        raise to_http_exception(e)
    return _render(session)


@router.post("/quick-quiz", response_model=QuickQuizResponse)
def create_quick_quiz(
    count: Optional[int] = Query(None, gt=0),
    question_bank: QuestionBankService = Depends(get_question_bank),
    session_service: SessionService = Depends(get_session_service)
):
    """Curate a quiz from every stored question and open a session on it"""
    try:
        pool = question_bank.collect_all()
        quiz = question_bank.build_quick_quiz(count, pool=pool)
    except QuizifyError as e:
        raise to_http_exception(e)

    session = session_service.start_for_ephemeral(quiz)
    return QuickQuizResponse(
        quiz=QuizResponse.from_quiz(quiz),
        total_available=len(pool),
        selected_count=quiz.question_count,
        session_id=session.session_id
    )


@router.post("/sessions", response_model=SessionView, status_code=201)
def create_session(
    request: SessionCreate,
    session_service: SessionService = Depends(get_session_service)
):
    """Start taking a stored quiz, or a freshly curated quick quiz"""
    try:
        if request.quick_quiz:
            session = session_service.start_quick_quiz(request.count)
        else:
            session = session_service.start_for_quiz(request.quiz_id, resume_latest=request.resume_latest)
    except QuizifyError as e:
        raise to_http_exception(e)
    return _render(session)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str, session_service: SessionService = Depends(get_session_service)):
    return _act(session_service, session_id, lambda session: None)


@router.post("/sessions/{session_id}/select", response_model=SessionView)
async def select_option(
    session_id: str,
    selection: OptionSelect,
    session_service: SessionService = Depends(get_session_service)
):
    return _act(session_service, session_id, lambda session: session.select_option(selection.option_index))


@router.post("/sessions/{session_id}/submit", response_model=SessionView)
def submit_answer(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """Submit the selected option; saves the attempt when it was the last open question"""
    return _act(session_service, session_id, lambda session: session.submit_answer())


@router.post("/sessions/{session_id}/next", response_model=SessionView)
def next_question(session_id: str, session_service: SessionService = Depends(get_session_service)):
    return _act(session_service, session_id, lambda session: session.next_question())


@router.post("/sessions/{session_id}/previous", response_model=SessionView)
async def previous_question(session_id: str, session_service: SessionService = Depends(get_session_service)):
    return _act(session_service, session_id, lambda session: session.previous_question())


@router.post("/sessions/{session_id}/finish", response_model=SessionView)
def finish_session(session_id: str, session_service: SessionService = Depends(get_session_service)):
    return _act(session_service, session_id, lambda session: session.finish())


@router.post("/sessions/{session_id}/retake", response_model=SessionView)
async def retake_quiz(session_id: str, session_service: SessionService = Depends(get_session_service)):
    return _act(session_service, session_id, lambda session: session.retake())


@router.post("/sessions/{session_id}/elaborate", response_model=SessionView)
def elaborate_explanation(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """Ask for a more detailed explanation of the current question"""
    return _act(session_service, session_id, lambda session: session.elaborate_explanation())


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str, session_service: SessionService = Depends(get_session_service)):
    if not session_service.end(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Session ended"}


from fastapi import APIRouter, Depends
import logging

from quizify.api.dependencies import get_progress_service, to_http_exception
from quizify.core.exceptions import QuizifyError
from quizify.schemas.progress_schema import ProgressOverview
from quizify.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProgressOverview)
async def get_progress(service: ProgressService = Depends(get_progress_service)):
    """Overall and per-subject performance across every saved attempt"""
    try:
        return service.get_overview()
    except QuizifyError as e:
        raise to_http_exception(e)

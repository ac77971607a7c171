import logging
from datetime import datetime
from typing import List, Optional

from quizify.agents.curator_agent import CuratorAgent
from quizify.config.settings import settings
from quizify.core.exceptions import EmptyQuestionBankError
from quizify.core.quiz_curation import QuizCurator
from quizify.db.store import QuizStore
from quizify.schemas.quiz_schema import Mcq, Quiz
from quizify.utils.helpers import generate_unique_id
from quizify.utils.logger import log_quiz_event

logger = logging.getLogger(__name__)

QUICK_QUIZ_SUBJECT = "Comprehensive Quick Quiz"
QUICK_QUIZ_ID_PREFIX = "quick-quiz"


class QuestionBankService:
    def __init__(self, store: QuizStore, curator: Optional[QuizCurator] = None):
        self.store = store
        self.curator = curator or QuizCurator(CuratorAgent())

    def collect_all(self) -> List[Mcq]:
        """Every question of every stored quiz, in store order, duplicates kept"""
        pool: List[Mcq] = []
        for quiz in self.store.get_quizzes():
            pool.extend(quiz.mcqs)
        return pool

    def build_quick_quiz(self, desired_count: Optional[int] = None, pool: Optional[List[Mcq]] = None) -> Quiz:
        """
        Build an unsaved quiz from the best questions across all quizzes

        Args:
            desired_count: Maximum number of questions (defaults to QUICK_QUIZ_SIZE)
            pool: Questions to pick from, if already collected

        Returns:
            Ephemeral Quiz that is never written to the store

        Raises:
            EmptyQuestionBankError: There are no stored questions
        """
        desired_count = settings.QUICK_QUIZ_SIZE if desired_count is None else desired_count

        if pool is None:
            pool = self.collect_all()
        if not pool:
            raise EmptyQuestionBankError(
                "No questions available in the question bank to generate a quick quiz"
            )

        selected = self.curator.curate(pool, desired_count)
        if not selected:
            raise EmptyQuestionBankError("Could not select any questions for a quick quiz")

        quiz = Quiz(
            id=generate_unique_id(QUICK_QUIZ_ID_PREFIX),
            subject=QUICK_QUIZ_SUBJECT,
            name=QUICK_QUIZ_SUBJECT,
            mcqs=selected,
            created_at=datetime.utcnow(),
            is_ephemeral=True
        )

        log_quiz_event(
            quiz.id, "quick_quiz", "created",
            pool_size=len(pool),
            question_count=len(selected)
        )
        return quiz

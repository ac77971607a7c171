import random

import pytest

from quizify.core.exceptions import EmptyQuestionBankError, LLMServiceError
from quizify.core.quiz_curation import QuizCurator
from quizify.schemas.generation_schema import CurationOutput
from quizify.services.question_bank_service import QUICK_QUIZ_SUBJECT, QuestionBankService
from quizify.tests.fakes import InMemoryQuizStore, ScriptedCuratorAgent, make_quiz


class TestQuestionBankService:
    def setup_method(self):
        """Setup test environment"""
        self.store = InMemoryQuizStore()
        self.agent = ScriptedCuratorAgent(output=CurationOutput(selected_indices=[0, 4, 2]))
        self.service = QuestionBankService(self.store, curator=QuizCurator(self.agent, rng=random.Random(1)))

    def test_collect_all_flattens_every_quiz(self):
        first = self.store.add_quiz(make_quiz(mcq_count=3, quiz_id="a"))
        second = self.store.add_quiz(make_quiz(mcq_count=2, quiz_id="b"))

        pool = self.service.collect_all()

        assert len(pool) == 5
        assert set(pool) == set(first.mcqs) | set(second.mcqs)

    def test_collect_all_keeps_duplicates(self):
        quiz = make_quiz(mcq_count=2, quiz_id="a")
        self.store.add_quiz(quiz)
        self.store.add_quiz(quiz.model_copy(update={"id": "copy"}))

        assert len(self.service.collect_all()) == 4

    def test_empty_bank_raises(self):
        with pytest.raises(EmptyQuestionBankError):
            self.service.build_quick_quiz(10)

    def test_quizzes_without_questions_raise(self):
        self.store.add_quiz(make_quiz(mcq_count=0))

        with pytest.raises(EmptyQuestionBankError):
            self.service.build_quick_quiz(10)

    def test_small_bank_used_whole_without_curation(self):
        quiz = self.store.add_quiz(make_quiz(mcq_count=4))

        quick = self.service.build_quick_quiz(10)

        assert quick.mcqs == quiz.mcqs
        assert self.agent.calls == 0

    def test_quick_quiz_is_ephemeral(self):
        self.store.add_quiz(make_quiz(mcq_count=6))

        quick = self.service.build_quick_quiz(3)

        assert quick.is_ephemeral
        assert quick.id.startswith("quick-quiz_")
        assert quick.subject == QUICK_QUIZ_SUBJECT
        assert len(quick.mcqs) == 3
        assert quick.id not in self.store.quizzes

    def test_curator_failure_still_builds_quiz(self):
        self.store.add_quiz(make_quiz(mcq_count=8))
        service = QuestionBankService(
            self.store,
            curator=QuizCurator(ScriptedCuratorAgent(error=LLMServiceError("timeout")), rng=random.Random(3))
        )

        quick = service.build_quick_quiz(5)

        assert len(quick.mcqs) == 5
        assert len(set(quick.mcqs)) == 5

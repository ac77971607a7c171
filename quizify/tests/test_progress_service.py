from quizify.schemas.attempt_schema import AttemptCreate
from quizify.services.progress_service import ProgressService
from quizify.tests.fakes import InMemoryQuizStore, make_quiz


class TestProgressService:
    def setup_method(self):
        """Setup test environment"""
        self.store = InMemoryQuizStore()
        self.service = ProgressService(self.store)

    def _attempt(self, quiz, score):
        total = len(quiz.mcqs)
        answers = [0] * total
        self.store.create_attempt(AttemptCreate(
            quiz_id=quiz.id, answers=answers, score=score, total_questions=total
        ))

    def test_no_attempts(self):
        self.store.add_quiz(make_quiz(quiz_id="a"))

        overview = self.service.get_overview()

        assert overview.total_quizzes_created == 1
        assert overview.total_attempts_made == 0
        assert overview.overall_average_score == 0
        assert overview.subjects == []

    def test_overall_average_is_mean_of_attempt_percentages(self):
        short = self.store.add_quiz(make_quiz(mcq_count=2, quiz_id="a"))
        long = self.store.add_quiz(make_quiz(mcq_count=8, quiz_id="b"))
        self._attempt(short, 2)  # 100%
        self._attempt(long, 2)   # 25%

        overview = self.service.get_overview()

        assert overview.total_attempts_made == 2
        assert overview.overall_average_score == 63  # 62.5 rounds half up

    def test_per_subject_totals_sorted_by_average(self):
        bio = self.store.add_quiz(make_quiz(mcq_count=4, quiz_id="bio", subject="Biology"))
        chem = self.store.add_quiz(make_quiz(mcq_count=5, quiz_id="chem", subject="Chemistry"))
        self._attempt(bio, 1)
        self._attempt(bio, 2)
        self._attempt(chem, 5)

        subjects = self.service.get_overview().subjects

        assert [s.subject for s in subjects] == ["Chemistry", "Biology"]
        chemistry, biology = subjects
        assert chemistry.average_score == 100
        assert biology.quizzes_taken == 2
        assert biology.average_score == 38  # (25% + 50%) / 2 = 37.5
        assert biology.total_correct == 3
        assert biology.total_attempted_questions == 8

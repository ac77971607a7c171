import pytest
from sqlalchemy.orm import sessionmaker

from quizify.core.exceptions import PersistenceError, QuizNotFoundError
from quizify.db.database import create_db_engine, init_db
from quizify.db.store import SQLAlchemyQuizStore
from quizify.schemas.attempt_schema import AttemptCreate
from quizify.schemas.quiz_schema import QuizCreate
from quizify.tests.fakes import make_batch


class TestSQLAlchemyQuizStore:
    def setup_method(self):
        """Setup test environment"""
        self.engine = create_db_engine("sqlite://", echo=False)
        init_db(bind=self.engine)
        self.store = SQLAlchemyQuizStore(sessionmaker(autocommit=False, autoflush=False, bind=self.engine))

    def teardown_method(self):
        self.engine.dispose()

    def _create(self, subject="Biology", pages=1, **kwargs):
        return self.store.create_quiz(QuizCreate(
            subject=subject,
            mcqs=[mcq for page in range(1, pages + 1) for mcq in make_batch(page)],
            **kwargs
        ))

    def _attempt(self, quiz, score):
        return self.store.create_attempt(AttemptCreate(
            quiz_id=quiz.id,
            answers=[0] * len(quiz.mcqs),
            score=score,
            total_questions=len(quiz.mcqs)
        ))

    def test_create_and_read_back_questions(self):
        quiz = self._create(pages=2, pdf_name="bio.pdf", notes="Page 1\n\nnotes")

        loaded = self.store.get_quiz_by_id(quiz.id)

        assert loaded.mcqs == make_batch(1) + make_batch(2)
        assert loaded.pdf_name == "bio.pdf"
        assert loaded.notes == "Page 1\n\nnotes"
        assert loaded.created_at is not None
        assert all(0 <= m.correct_answer_index < len(m.options) == 4 for m in loaded.mcqs)

    def test_pdf_bytes_loaded_only_on_request(self):
        quiz = self._create(pdf_data=b"%PDF-1.4 bytes")

        assert self.store.get_quiz_by_id(quiz.id).pdf_data is None
        assert self.store.get_quiz_by_id(quiz.id, include_pdf=True).pdf_data == b"%PDF-1.4 bytes"

    def test_missing_quiz(self):
        assert self.store.get_quiz_by_id("nope") is None

    def test_quizzes_listed_newest_first(self):
        first = self._create(subject="Biology")
        second = self._create(subject="Chemistry")

        assert [q.id for q in self.store.get_quizzes()] == [second.id, first.id]

    def test_rename(self):
        quiz = self._create(pdf_name="bio.pdf")

        renamed = self.store.rename_quiz(quiz.id, "Cell biology")

        assert renamed.name == "Cell biology"
        assert self.store.get_quiz_by_id(quiz.id).display_name == "Cell biology"

    def test_rename_missing_quiz(self):
        with pytest.raises(QuizNotFoundError):
            self.store.rename_quiz("nope", "x")

    def test_distinct_subjects(self):
        self._create(subject="Physics")
        self._create(subject="Biology")
        self._create(subject="Physics")

        assert self.store.list_distinct_subjects() == ["Biology", "Physics"]

    def test_attempts_in_order_and_latest(self):
        quiz = self._create()
        first = self._attempt(quiz, 2)
        second = self._attempt(quiz, 4)

        assert [a.id for a in self.store.get_attempts_for_quiz(quiz.id)] == [first.id, second.id]
        assert self.store.get_latest_attempt_for_quiz(quiz.id).id == second.id
        assert len(self.store.get_all_attempts()) == 2

    def test_attempt_for_missing_quiz(self):
        with pytest.raises(QuizNotFoundError):
            self.store.create_attempt(AttemptCreate(quiz_id="nope", answers=[0], score=1, total_questions=1))

    def test_delete_cascades_to_attempts(self):
        quiz = self._create()
        other = self._create(subject="Chemistry")
        self._attempt(quiz, 1)
        self._attempt(other, 3)

        assert self.store.delete_quiz(quiz.id)

        assert self.store.get_quiz_by_id(quiz.id) is None
        assert self.store.get_attempts_for_quiz(quiz.id) == []
        assert [a.quiz_id for a in self.store.get_all_attempts()] == [other.id]
        assert not self.store.delete_quiz(quiz.id)

    def test_database_errors_are_wrapped(self):
        # Fresh in-memory database without tables
        broken = SQLAlchemyQuizStore(sessionmaker(bind=create_db_engine("sqlite://", echo=False)))

        with pytest.raises(PersistenceError):
            broken.get_quizzes()

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional

from quizify.core.exceptions import (
    AnswerValidationError,
    ElaborationError,
    SessionBusyError,
    SessionStateError,
)
from quizify.schemas.attempt_schema import AttemptCreate, QuizAttempt
from quizify.schemas.quiz_schema import Mcq, Quiz
from quizify.schemas.session_schema import QuestionView, SessionView, SlotState
from quizify.utils.helpers import generate_unique_id

logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "Please select an option before submitting."


class QuizSession:
    """
    One pass through a quiz, one question in view at a time.

    Each slot moves unanswered -> selected -> submitted (correct/incorrect) and is
    locked once submitted. The session finishes when every slot is submitted, or
    when the user finishes from the last question after submitting it; finishing
    records a QuizAttempt. While a save or elaboration call is in flight every
    other action is rejected with SessionBusyError.
    """

    def __init__(self, quiz: Quiz, store=None, elaborator=None, session_id: Optional[str] = None):
        if not quiz.mcqs:
            raise SessionStateError("Quiz has no questions")

        self.session_id = session_id or str(uuid.uuid4())
        self.quiz = quiz
        self.store = store
        self.elaborator = elaborator

        self._lock = threading.RLock()
        self._busy = False
        self._reset()

    @classmethod
    def review(cls, quiz: Quiz, attempt: QuizAttempt, store=None, elaborator=None) -> "QuizSession":
        """Open a finished session showing a saved attempt, ready for retake"""
        session = cls(quiz, store=store, elaborator=elaborator)
        for index, answer in enumerate(attempt.answers[:len(quiz.mcqs)]):
            if answer is not None:
                session._selected[index] = answer
                session._submitted[index] = True
        session._finished = True
        session.attempt = attempt
        return session

    def _reset(self):
        count = len(self.quiz.mcqs)
        self.current_index = 0
        self._selected: List[Optional[int]] = [None] * count
        self._submitted: List[bool] = [False] * count
        self._elaborated: Dict[int, str] = {}
        self._finished = False
        self.attempt: Optional[QuizAttempt] = None

    # ------------------------------------------------------------------ state

    @property
    def total_questions(self) -> int:
        return len(self.quiz.mcqs)

    @property
    def current_mcq(self) -> Mcq:
        return self.quiz.mcqs[self.current_index]

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def busy(self) -> bool:
        return self._busy

    def slot_state(self, index: int) -> SlotState:
        if self._submitted[index]:
            if self._selected[index] == self.quiz.mcqs[index].correct_answer_index:
                return SlotState.CORRECT
            return SlotState.INCORRECT
        if self._selected[index] is not None:
            return SlotState.SELECTED
        return SlotState.UNANSWERED

    def slot_states(self) -> List[SlotState]:
        return [self.slot_state(i) for i in range(self.total_questions)]

    def displayed_explanation(self, index: int) -> str:
        return self._elaborated.get(index) or self.quiz.mcqs[index].explanation

    @contextmanager
    def _in_flight(self):
        with self._lock:
            self._check_not_busy()
            self._busy = True
        try:
            yield
        finally:
            with self._lock:
                self._busy = False

    def _check_not_busy(self):
        if self._busy:
            raise SessionBusyError("Please wait for the current request to finish")

    def _check_not_finished(self):
        if self._finished:
            raise SessionStateError("Quiz is finished; retake it to answer again")

    # ---------------------------------------------------------------- actions

    def select_option(self, option_index: int) -> SlotState:
        with self._lock:
            self._check_not_busy()
            self._check_not_finished()
            if self._submitted[self.current_index]:
                raise SessionStateError("This question has already been submitted")
            if not 0 <= option_index < len(self.current_mcq.options):
                raise AnswerValidationError(f"Option {option_index} does not exist for this question")

            self._selected[self.current_index] = option_index
            return self.slot_state(self.current_index)

    def submit_answer(self) -> SlotState:
        with self._lock:
            self._check_not_busy()
            self._check_not_finished()
            index = self.current_index
            if self._submitted[index]:
                raise SessionStateError("This question has already been submitted")
            if self._selected[index] is None:
                raise AnswerValidationError(NO_SELECTION_MESSAGE)

            self._submitted[index] = True
            state = self.slot_state(index)
            all_submitted = all(self._submitted)
            if all_submitted:
                self._busy = True

        if all_submitted:
            self._finalize()
        return state

    def next_question(self) -> int:
        with self._lock:
            self._check_not_busy()
            if self.current_index < self.total_questions - 1:
                self.current_index += 1
                return self.current_index
            should_finish = not self._finished and self._submitted[self.current_index]
            if should_finish:
                self._busy = True

        if should_finish:
            self._finalize()
        return self.current_index

    def previous_question(self) -> int:
        with self._lock:
            self._check_not_busy()
            if self.current_index > 0:
                self.current_index -= 1
            return self.current_index

    def finish(self) -> QuizAttempt:
        with self._lock:
            self._check_not_busy()
            if self._finished:
                return self.attempt
            on_submitted_last = (
                self.current_index == self.total_questions - 1
                and self._submitted[self.current_index]
            )
            if not (all(self._submitted) or on_submitted_last):
                raise SessionStateError(
                    "Submit the last question before finishing the quiz"
                )
            self._busy = True
        return self._finalize()

    def retake(self):
        with self._lock:
            self._check_not_busy()
            if not self._finished:
                raise SessionStateError("Only a finished quiz can be retaken")
            self._reset()
        logger.info(f"Session {self.session_id}: retaking quiz {self.quiz.id}")

    def elaborate_explanation(self) -> str:
        """
        Replace the displayed explanation of the current question with a richer one

        The stored question is never modified. On failure the previous
        explanation stays on display and ElaborationError is raised.
        """
        if self.elaborator is None:
            raise ElaborationError("Explanation elaboration is not available")

        with self._lock:
            index = self.current_index
            if not self._submitted[index]:
                raise SessionStateError("Submit the question before asking for a detailed explanation")
            current = self.displayed_explanation(index)

        with self._in_flight():
            elaborated = self.elaborator.elaborate(self.quiz.subject, self.quiz.mcqs[index], current)

        with self._lock:
            self._elaborated[index] = elaborated
        return elaborated

    # ------------------------------------------------------------- finishing

    def _finalize(self) -> QuizAttempt:
        # Callers set _busy inside the same lock hold as their state check,
        # so only one finalize can run per pass.
        try:
            with self._lock:
                answers = [
                    self._selected[i] if self._submitted[i] else None
                    for i in range(self.total_questions)
                ]
                score = sum(1 for state in self.slot_states() if state == SlotState.CORRECT)

            if self.quiz.is_ephemeral or self.store is None:
                attempt = QuizAttempt(
                    id=generate_unique_id("attempt"),
                    quiz_id=self.quiz.id,
                    answers=answers,
                    score=score,
                    total_questions=self.total_questions,
                    completed_at=datetime.utcnow(),
                    persisted=False
                )
            else:
                attempt = self.store.create_attempt(AttemptCreate(
                    quiz_id=self.quiz.id,
                    answers=answers,
                    score=score,
                    total_questions=self.total_questions
                ))

            with self._lock:
                self.attempt = attempt
                self._finished = True
        finally:
            with self._lock:
                self._busy = False

        logger.info(
            f"Session {self.session_id}: quiz {self.quiz.id} finished "
            f"with {score}/{self.total_questions}"
        )
        return attempt

    # ------------------------------------------------------------------ views

    def view(self) -> SessionView:
        with self._lock:
            index = self.current_index
            mcq = self.current_mcq
            submitted = self._submitted[index]
            answered = sum(self._submitted)

            question = QuestionView(
                index=index,
                question=mcq.question,
                options=list(mcq.options),
                state=self.slot_state(index),
                selected_index=self._selected[index],
                correct_answer_index=mcq.correct_answer_index if submitted else None,
                explanation=self.displayed_explanation(index) if submitted else None,
                explanation_elaborated=index in self._elaborated,
            )

            return SessionView(
                session_id=self.session_id,
                quiz_id=self.quiz.id,
                subject=self.quiz.subject,
                total_questions=self.total_questions,
                current_index=index,
                answered_count=answered,
                progress_percent=round(answered / self.total_questions * 100, 1),
                finished=self._finished,
                busy=self._busy,
                slot_states=self.slot_states(),
                question=question,
                attempt=self.attempt,
            )

import math
import logging
from typing import Dict, List

from quizify.db.store import QuizStore
from quizify.schemas.attempt_schema import QuizAttempt
from quizify.schemas.progress_schema import ProgressOverview, SubjectProgress

logger = logging.getLogger(__name__)


def _rounded_percentage(ratio_sum: float, count: int) -> int:
    # Half-up rounding, so 62.5% shows as 63%
    if count == 0:
        return 0
    return int(math.floor(ratio_sum / count * 100 + 0.5))


def _ratio(attempt: QuizAttempt) -> float:
    if attempt.total_questions == 0:
        return 0.0
    return attempt.score / attempt.total_questions


class ProgressService:
    def __init__(self, store: QuizStore):
        self.store = store

    def get_overview(self) -> ProgressOverview:
        """
        Aggregate every stored attempt into overall and per-subject figures

        Each attempt counts once regardless of its length; averages are the mean
        of per-attempt percentages. Attempts whose quiz no longer exists only
        count towards the overall figures.
        """
        quizzes = self.store.get_quizzes()
        attempts = self.store.get_all_attempts()
        subjects_by_quiz = {quiz.id: quiz.subject for quiz in quizzes}

        overall = _rounded_percentage(sum(_ratio(a) for a in attempts), len(attempts))

        per_subject: Dict[str, Dict[str, float]] = {}
        for attempt in attempts:
            subject = subjects_by_quiz.get(attempt.quiz_id)
            if subject is None:
                continue
            data = per_subject.setdefault(subject, {
                "ratio_sum": 0.0,
                "quizzes_taken": 0,
                "total_correct": 0,
                "total_attempted": 0,
            })
            data["ratio_sum"] += _ratio(attempt)
            data["quizzes_taken"] += 1
            data["total_correct"] += attempt.score
            data["total_attempted"] += attempt.total_questions

        subjects: List[SubjectProgress] = [
            SubjectProgress(
                subject=subject,
                quizzes_taken=data["quizzes_taken"],
                average_score=_rounded_percentage(data["ratio_sum"], data["quizzes_taken"]),
                total_correct=data["total_correct"],
                total_attempted_questions=data["total_attempted"],
            )
            for subject, data in per_subject.items()
        ]
        subjects.sort(key=lambda s: s.average_score, reverse=True)

        return ProgressOverview(
            total_quizzes_created=len(quizzes),
            total_attempts_made=len(attempts),
            overall_average_score=overall,
            subjects=subjects,
        )

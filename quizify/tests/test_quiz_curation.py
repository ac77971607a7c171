import random

import pytest

from quizify.core.exceptions import LLMServiceError, MalformedResponseError
from quizify.core.quiz_curation import QuizCurator
from quizify.schemas.generation_schema import CurationOutput
from quizify.tests.fakes import ScriptedCuratorAgent, make_mcq


class TestQuizCurator:
    def setup_method(self):
        """Setup test environment"""
        self.pool = [make_mcq(f"q{i}", correct=i % 4) for i in range(10)]

    def _curator(self, output=None, error=None):
        self.agent = ScriptedCuratorAgent(output=output, error=error)
        return QuizCurator(self.agent, rng=random.Random(7))

    def test_small_pool_returned_unchanged_without_call(self):
        curator = self._curator()

        selected = curator.curate(self.pool[:4], desired_count=5)

        assert selected == self.pool[:4]
        assert self.agent.calls == 0

    def test_pool_equal_to_desired_returned_unchanged(self):
        curator = self._curator()

        assert curator.curate(self.pool, desired_count=10) == self.pool
        assert self.agent.calls == 0

    def test_non_positive_desired_count_rejected(self):
        curator = self._curator()

        with pytest.raises(ValueError):
            curator.curate(self.pool, desired_count=0)

    def test_selected_indices_mapped_in_order(self):
        curator = self._curator(CurationOutput(selected_indices=[7, 2, 5]))

        selected = curator.curate(self.pool, desired_count=3)

        assert selected == [self.pool[7], self.pool[2], self.pool[5]]
        assert self.agent.calls == 1

    def test_invalid_indices_discarded(self):
        curator = self._curator(CurationOutput(selected_indices=[1, 99, -1, "3", 2.5, True, 4]))

        selected = curator.curate(self.pool, desired_count=5)

        assert selected == [self.pool[1], self.pool[4]]

    def test_duplicate_indices_kept_once(self):
        curator = self._curator(CurationOutput(selected_indices=[3, 3, 6, 3]))

        selected = curator.curate(self.pool, desired_count=5)

        assert selected == [self.pool[3], self.pool[6]]

    def test_result_truncated_never_padded(self):
        curator = self._curator(CurationOutput(selected_indices=list(range(10))))

        assert curator.curate(self.pool, desired_count=4) == self.pool[:4]

    def test_selected_objects_matched_against_pool(self):
        outsider = make_mcq("not-in-pool").model_dump()
        raw = [self.pool[8].model_dump(), outsider, {"question": "broken"}, self.pool[0].model_dump()]
        curator = self._curator(CurationOutput(selected_mcqs=raw))

        selected = curator.curate(self.pool, desired_count=5)

        assert selected == [self.pool[8], self.pool[0]]

    def test_camel_case_objects_accepted(self):
        mcq = self.pool[5]
        raw = {
            "question": mcq.question,
            "options": list(mcq.options),
            "correctAnswerIndex": mcq.correct_answer_index,
            "explanation": mcq.explanation,
        }
        curator = self._curator(CurationOutput(selected_mcqs=[raw]))

        assert curator.curate(self.pool, desired_count=3) == [mcq]

    @pytest.mark.parametrize("error", [
        LLMServiceError("Connection refused"),
        MalformedResponseError("Invalid JSON in response"),
    ])
    def test_failed_call_falls_back_to_random_subset(self, error):
        curator = self._curator(error=error)

        selected = curator.curate(self.pool, desired_count=6)

        assert len(selected) == 6
        assert len(set(selected)) == 6
        assert all(mcq in self.pool for mcq in selected)

    def test_all_invalid_indices_fall_back_to_random_subset(self):
        curator = self._curator(CurationOutput(selected_indices=[42, -3]))

        selected = curator.curate(self.pool, desired_count=3)

        assert len(selected) == 3
        assert len(set(selected)) == 3
        assert all(mcq in self.pool for mcq in selected)

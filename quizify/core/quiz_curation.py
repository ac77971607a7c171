import random
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from quizify.core.exceptions import QuizifyError
from quizify.schemas.generation_schema import CurationOutput
from quizify.schemas.quiz_schema import Mcq

logger = logging.getLogger(__name__)


class QuizCurator:
    """
    Selects a bounded "best" subset of a question pool.

    The model is asked for indices into the pool. Whatever comes back is treated
    as untrusted: bad entries are dropped one by one, and an unusable reply falls
    back to a uniform random sample so the caller always gets questions.
    """

    def __init__(self, curator_agent, rng: Optional[random.Random] = None):
        self.curator_agent = curator_agent
        self.rng = rng or random.SystemRandom()

    def curate(self, pool: List[Mcq], desired_count: int) -> List[Mcq]:
        """
        Pick at most ``desired_count`` questions from ``pool``

        Args:
            pool: Candidate questions
            desired_count: Maximum number of questions wanted (> 0)

        Returns:
            Selected questions, never more than ``desired_count``
        """
        if desired_count <= 0:
            raise ValueError("desired_count must be positive")

        if len(pool) <= desired_count:
            return list(pool)

        try:
            output = self.curator_agent.select_best(pool, desired_count)
        except QuizifyError as e:
            logger.warning(f"Curation call failed, using random selection: {e}")
            return self._random_subset(pool, desired_count)

        selected = self._resolve_selection(output, pool)
        if not selected:
            logger.warning("Curation result unusable after validation, using random selection")
            return self._random_subset(pool, desired_count)

        logger.info(f"Curated {min(len(selected), desired_count)} of {len(pool)} questions")
        return selected[:desired_count]

    def _resolve_selection(self, output: CurationOutput, pool: List[Mcq]) -> List[Mcq]:
        if output.selected_indices is not None:
            return self._resolve_indices(output.selected_indices, pool)
        return self._resolve_objects(output.selected_mcqs or [], pool)

    def _resolve_indices(self, indices: List[Any], pool: List[Mcq]) -> List[Mcq]:
        selected = []
        seen = set()
        for index in indices:
            # bool is an int subclass; JSON true/false is never a valid index
            if isinstance(index, bool) or not isinstance(index, int):
                logger.warning(f"Curator returned a non-integer index: {index!r}")
                continue
            if not 0 <= index < len(pool):
                logger.warning(f"Curator returned an invalid index: {index}. Max index: {len(pool) - 1}")
                continue
            if index in seen:
                continue
            seen.add(index)
            selected.append(pool[index])
        return selected

    def _resolve_objects(self, raw_mcqs: List[Any], pool: List[Mcq]) -> List[Mcq]:
        pool_positions = {}
        for position, mcq in enumerate(pool):
            pool_positions.setdefault(mcq, position)

        selected = []
        seen = set()
        for raw in raw_mcqs:
            try:
                mcq = Mcq.model_validate(raw)
            except ValidationError:
                logger.warning("Curator returned a malformed question object")
                continue
            position = pool_positions.get(mcq)
            if position is None:
                logger.warning("Curator returned a question that is not in the pool")
                continue
            if position in seen:
                continue
            seen.add(position)
            selected.append(pool[position])
        return selected

    def _random_subset(self, pool: List[Mcq], desired_count: int) -> List[Mcq]:
        return self.rng.sample(list(pool), min(desired_count, len(pool)))

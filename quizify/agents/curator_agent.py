from typing import List, Optional
import logging

from pydantic import ValidationError

from quizify.config.llm_config import llm_client, LLMClient
from quizify.config.prompts import SystemPrompts, UserPrompts
from quizify.core.exceptions import CurationError, QuizifyError
from quizify.schemas.generation_schema import CurationOutput
from quizify.schemas.quiz_schema import Mcq

logger = logging.getLogger(__name__)


class CuratorAgent:
    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or llm_client
        self.system_prompt = SystemPrompts.CURATOR_SYSTEM

    def select_best(self, all_mcqs: List[Mcq], desired_count: int) -> CurationOutput:
        """
        Ask the model which questions of the pool are best

        The pool is sent with explicit indices and only indices are requested back,
        which keeps the reply small even for pools of several hundred questions.

        Returns:
            CurationOutput; entries are NOT bounds-checked here

        Raises:
            CurationError: The model could not be reached or returned neither selection list
        """
        indexed = [
            {
                "index": i,
                "question": mcq.question,
                "options": list(mcq.options),
                "correctAnswerIndex": mcq.correct_answer_index,
                "explanation": mcq.explanation,
            }
            for i, mcq in enumerate(all_mcqs)
        ]
        prompt = UserPrompts.select_best_mcqs(indexed, desired_count)

        try:
            response = self.llm.generate_json(prompt=prompt, system_prompt=self.system_prompt)
            output = CurationOutput.model_validate(response)
        except ValidationError as e:
            logger.warning(f"Malformed curation response: {e.error_count()} errors")
            raise CurationError("Malformed curation response") from e
        except QuizifyError as e:
            logger.error(f"Error curating questions: {e}")
            raise CurationError(f"Curation failed: {e}") from e

        logger.info(
            f"Curator returned {len(output.selected_indices or output.selected_mcqs or [])} "
            f"selections for {len(all_mcqs)} questions"
        )
        return output

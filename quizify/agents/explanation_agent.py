from typing import Optional
import logging

from pydantic import ValidationError

from quizify.config.llm_config import llm_client, LLMClient
from quizify.config.prompts import SystemPrompts, UserPrompts
from quizify.core.exceptions import ElaborationError, QuizifyError
from quizify.schemas.generation_schema import ElaborationOutput
from quizify.schemas.quiz_schema import Mcq

logger = logging.getLogger(__name__)


class ExplanationAgent:
    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or llm_client
        self.system_prompt = SystemPrompts.EXPLANATION_SYSTEM

    def elaborate(self, subject: str, mcq: Mcq, current_explanation: str) -> str:
        """
        Produce a richer explanation for a question

        Args:
            subject: Quiz subject, for context
            mcq: The question being explained
            current_explanation: The explanation currently shown to the user

        Returns:
            The elaborated explanation text

        Raises:
            ElaborationError: The model failed or answered in the wrong shape
        """
        prompt = UserPrompts.elaborate_explanation(
            subject=subject,
            question=mcq.question,
            options=list(mcq.options),
            correct_answer_index=mcq.correct_answer_index,
            current_explanation=current_explanation
        )

        try:
            response = self.llm.generate_json(prompt=prompt, system_prompt=self.system_prompt)
            output = ElaborationOutput.model_validate(response)
        except ValidationError as e:
            logger.warning(f"Malformed elaboration response: {e.error_count()} errors")
            raise ElaborationError("Could not generate a more detailed explanation") from e
        except QuizifyError as e:
            logger.error(f"Error elaborating explanation: {e}")
            raise ElaborationError("Could not generate a more detailed explanation") from e

        if not output.elaborated_explanation.strip():
            raise ElaborationError("Could not generate a more detailed explanation")

        return output.elaborated_explanation

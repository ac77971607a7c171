from typing import Optional
import logging

from pydantic import ValidationError

from quizify.config.llm_config import llm_client, LLMClient
from quizify.config.prompts import SystemPrompts, UserPrompts
from quizify.config.settings import settings
from quizify.core.exceptions import MalformedResponseError
from quizify.schemas.generation_schema import PageGenerationOutput

logger = logging.getLogger(__name__)


class QuestionAgent:
    def __init__(self, llm: Optional[LLMClient] = None, batch_size: int = None):
        self.llm = llm or llm_client
        self.batch_size = settings.MCQS_PER_PAGE if batch_size is None else batch_size
        self.system_prompt = SystemPrompts.PAGE_QUESTION_SYSTEM

    def generate_for_page(
        self,
        page_text: str,
        subject: str,
        page_number: int,
        total_pages: int
    ) -> PageGenerationOutput:
        """
        Generate one fixed-size batch of MCQs (and notes) for a single page

        Args:
            page_text: Text of the page
            subject: Subject of the document
            page_number: 1-based page number
            total_pages: Pages in the document

        Returns:
            PageGenerationOutput with exactly ``batch_size`` questions

        Raises:
            MalformedResponseError: The reply is missing fields or has the wrong count
            LLMServiceError: The model could not be reached
        """
        prompt = UserPrompts.generate_page_mcqs(
            page_text=page_text,
            subject=subject,
            page_number=page_number,
            total_pages=total_pages,
            count=self.batch_size
        )

        response = self.llm.generate_json(prompt=prompt, system_prompt=self.system_prompt)

        try:
            output = PageGenerationOutput.model_validate(response)
        except ValidationError as e:
            logger.warning(f"Page {page_number}: malformed question batch: {e.error_count()} errors")
            raise MalformedResponseError(f"Malformed question batch: {e.errors()[0]['msg']}") from e

        if not output.mcqs:
            raise MalformedResponseError("No MCQs returned by AI")

        if len(output.mcqs) != self.batch_size:
            raise MalformedResponseError(
                f"Expected {self.batch_size} MCQs, got {len(output.mcqs)}"
            )

        logger.info(f"Generated {len(output.mcqs)} questions for page {page_number}/{total_pages}")
        return output

from openai import OpenAI, OpenAIError
import logging
from typing import Dict, Optional
import json

from quizify.config.settings import settings
from quizify.core.exceptions import LLMServiceError, MalformedResponseError

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(self):
        self.model = settings.OPENAI_MODEL
        self.base_url = settings.LLM_BASE_URL
        self._client = None  # NOT CREATED YET

    def _get_client(self) -> OpenAI:
        """Lazily create the OpenAI-compatible client on first use"""
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise LLMServiceError("OPENAI_API_KEY is not set in environment variables")

            logger.info(f"Initializing LLM with model: {self.model}")
            logger.info(f"Using base URL: {self.base_url}")

            self._client = OpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=self.base_url,
            )

        return self._client

    def generate(self, prompt: str, system_prompt: Optional[str] = None, **kwargs) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs.setdefault("temperature", settings.LLM_TEMPERATURE)

        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=messages,
                **kwargs
            )
        except OpenAIError as e:
            logger.error(f"LLM API error: {e}")
            raise LLMServiceError(str(e)) from e

        content = response.choices[0].message.content
        if not content:
            raise MalformedResponseError("LLM returned an empty message")
        return content

    def generate_json(self, prompt: str, system_prompt: Optional[str] = None) -> Dict:
        response = self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            response_format={"type": "json_object"}
        )
        try:
            data = json.loads(response)
        except json.JSONDecodeError as e:
            logger.warning(f"LLM returned invalid JSON: {e}")
            raise MalformedResponseError(f"Invalid JSON from LLM: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponseError("Expected a JSON object from LLM")
        return data


# Global instance (client is created on first call)
llm_client = LLMClient()

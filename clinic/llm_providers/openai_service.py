"""
Patient messages through OpenAI chat completions
"""
import os

from django.conf import settings
from openai import OpenAI

from .base import BaseLLMService


class OpenAIService(BaseLLMService):
    """Key and model come from the environment / settings unless passed in"""

    provider_id = "openai"

    def __init__(self, *, api_key: str | None = None, model: str | None = None, timeout: float | None = None):
        if api_key is None:
            api_key = os.getenv("OPENAI_API_KEY") or getattr(settings, "OPENAI_API_KEY", "")
        self._api_key = api_key
        self._model = model or settings.OPENAI_MODEL
        self._timeout = timeout if timeout is not None else settings.LLM_TIMEOUT

    def generate(self, system_message: str, user_message: str, *, temperature: float = 0.7,
                 max_tokens: int = 800) -> str:
        if not self._api_key:
            raise ValueError("OPENAI_API_KEY is not configured; set it or USE_MOCK_LLM=1")

        # one short system + user exchange per patient message
        completion = OpenAI(api_key=self._api_key, timeout=self._timeout).chat.completions.create(
            model=self._model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
        )
        text = completion.choices[0].message.content
        if not text:
            raise ValueError(f"{self._model} returned an empty message")
        return text

"""
Anthropic Claude messages API
"""
import os

from anthropic import Anthropic
from django.conf import settings

from .base import BaseLLMService


class ClaudeService(BaseLLMService):
    provider_id = "claude"

    def __init__(self, *, api_key: str | None = None, model: str | None = None, timeout: float | None = None):
        self._api_key = api_key if api_key is not None else (
            os.getenv("ANTHROPIC_API_KEY") or getattr(settings, "ANTHROPIC_API_KEY", "")
        )
        self._model = model or getattr(settings, "CLAUDE_MODEL", "claude-3-5-sonnet-20241022")
        self._timeout = timeout if timeout is not None else settings.LLM_TIMEOUT

    def generate(
        self,
        system_message: str,
        user_message: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 800,
    ) -> str:
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY not found in environment or settings")

        client = Anthropic(api_key=self._api_key, timeout=self._timeout)
        message = client.messages.create(
            model=self._model,
            max_tokens=max_tokens,
            system=system_message,
            messages=[{"role": "user", "content": user_message}],
            temperature=temperature,
        )
        # content is a list of blocks, keep the text ones
        text_parts = [block.text for block in message.content if hasattr(block, "text")]
        return "".join(text_parts)

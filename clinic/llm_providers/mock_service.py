"""
Mock service: fixed text, no network (USE_MOCK_LLM=1, tests, local dev)
"""
from .base import BaseLLMService

MOCK_MESSAGE_TEXT = (
    "[Mock] 안녕하세요, 샤인치과입니다. 오늘 상담해 주셔서 감사합니다. "
    "다음 내원 일정에 맞춰 다시 안내드리겠습니다."
)


class MockLLMService(BaseLLMService):
    provider_id = "mock"

    def generate(
        self,
        system_message: str,
        user_message: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 800,
    ) -> str:
        return MOCK_MESSAGE_TEXT

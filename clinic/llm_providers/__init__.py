"""
LLM abstraction used by the message worker: OpenAI, Claude or a mock,
selected through settings
"""
from .base import BaseLLMService
from .openai_service import OpenAIService
from .claude_service import ClaudeService
from .mock_service import MockLLMService
from .factory import available_providers, get_llm_service, resolve_provider

__all__ = [
    "BaseLLMService",
    "OpenAIService",
    "ClaudeService",
    "MockLLMService",
    "available_providers",
    "get_llm_service",
    "resolve_provider",
]

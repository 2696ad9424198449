"""
Provider name (request row or settings.LLM_PROVIDER) -> text generation service
"""
from typing import Dict, Type

from django.conf import settings

from .base import BaseLLMService
from .openai_service import OpenAIService
from .claude_service import ClaudeService
from .mock_service import MockLLMService

_SERVICE_REGISTRY: Dict[str, Type[BaseLLMService]] = {
    OpenAIService.provider_id: OpenAIService,
    ClaudeService.provider_id: ClaudeService,
    MockLLMService.provider_id: MockLLMService,
}


def available_providers() -> list[str]:
    return sorted(_SERVICE_REGISTRY)


def resolve_provider(provider: str | None = None) -> str:
    """
    Normalized provider name; blank falls back to settings.LLM_PROVIDER.
    ValueError for a name nobody registered, so message requests can be
    rejected before they reach the worker.
    """
    name = (provider or "").strip().lower() or str(getattr(settings, "LLM_PROVIDER", "openai")).lower()
    if name not in _SERVICE_REGISTRY:
        raise ValueError(f"Unknown LLM provider: {name}. Known: {available_providers()}")
    return name


def get_llm_service(provider: str | None = None) -> BaseLLMService:
    # USE_MOCK_LLM=1 (local runs, tests) never reaches a vendor API
    if getattr(settings, "USE_MOCK_LLM", True):
        return MockLLMService()
    return _SERVICE_REGISTRY[resolve_provider(provider)]()


def register_llm_service(provider: str, service_cls: Type[BaseLLMService]) -> None:
    _SERVICE_REGISTRY[provider.lower()] = service_cls

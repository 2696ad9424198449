"""
Text generation service interface
The message worker only depends on this, never on a concrete vendor SDK
"""
from abc import ABC, abstractmethod


class BaseLLMService(ABC):
    """
    Parent of every LLM service; a new vendor subclasses it and implements generate
    """

    provider_id: str = "unknown"  # overridden: "openai", "claude", "mock"

    @abstractmethod
    def generate(
        self,
        system_message: str,
        user_message: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 800,
    ) -> str:
        """
        Generate one text completion
        :param system_message: role / tone instructions
        :param user_message: the patient message request
        :param temperature: randomness 0-1
        :param max_tokens: upper bound of generated tokens
        :return: generated text
        """

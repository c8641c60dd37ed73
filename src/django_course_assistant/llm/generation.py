import logging
from abc import ABC, abstractmethod
from typing import Iterator

from django_course_assistant.exceptions import GenerationError

from .base import LLMService

logger = logging.getLogger(__name__)


class TextGenerator(ABC):
    """Base class for backends which turn a prompt into answer text."""

    @property
    def generator_id(self) -> str:
        """Get unique identifier for this generator."""
        return self.__class__.__name__

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the complete response for a prompt."""
        pass

    @abstractmethod
    def stream(self, prompt: str) -> Iterator[str]:
        """Yield partial response text in the order the backend produces it."""
        pass


class CoreTextGenerator(TextGenerator):
    """Text generator that uses the core completion API."""

    def __init__(self, llm_service: LLMService):
        self.llm_service = llm_service

    @property
    def generator_id(self) -> str:
        return f"core_{self.llm_service.service_id}"

    def _messages(self, prompt: str) -> list[dict[str, str]]:
        return [{"role": "user", "content": prompt}]

    def generate(self, prompt: str) -> str:
        try:
            response = self.llm_service.completion(self._messages(prompt))
        except Exception as e:
            raise GenerationError(f"Failed to generate answer: {e}") from e

        if not response.choices:
            raise GenerationError("Generation backend returned no choices")
        return response.choices[0].message.content or ""

    def stream(self, prompt: str) -> Iterator[str]:
        try:
            chunks = self.llm_service.completion(self._messages(prompt), stream=True)
        except Exception as e:
            raise GenerationError(f"Failed to start answer stream: {e}") from e

        try:
            for chunk in chunks:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except Exception as e:
            raise GenerationError(f"Answer stream failed: {e}") from e
        finally:
            close = getattr(chunks, "close", None)
            if close is not None:
                logger.debug("Closing upstream answer stream")
                close()

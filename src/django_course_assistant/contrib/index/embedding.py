import logging
from abc import ABC, abstractmethod
from typing import Iterable, Sequence

import numpy as np

from django_course_assistant.exceptions import DimensionMismatchError, EmbeddingError
from django_course_assistant.llm import LLMService

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors of equal length.

    A zero vector has no direction, so any comparison involving one scores 0.0.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vectors must have the same length (got {len(a)} and {len(b)})"
        )

    vector_a = np.asarray(a, dtype=float)
    vector_b = np.asarray(b, dtype=float)
    norms = np.linalg.norm(vector_a) * np.linalg.norm(vector_b)
    if norms == 0:
        return 0.0
    return float(np.dot(vector_a, vector_b) / norms)


class EmbeddingProvider(ABC):
    """Base class for providers which turn text into embedding vectors."""

    @property
    def provider_id(self) -> str:
        """Get unique identifier for this provider."""
        return self.__class__.__name__

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single string. Raises EmbeddingError on failure."""
        pass

    def embed_batch(self, texts: Iterable[str]) -> list[list[float]]:
        """Embed each text in turn, one backend call per text, in input order."""
        return [self.embed(text) for text in texts]

    def similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        return cosine_similarity(a, b)


class CoreEmbeddingProvider(EmbeddingProvider):
    """Embedding provider that uses the core embeddings API."""

    def __init__(self, llm_service: LLMService):
        """Initialize with a core LLM Service instance.

        Args:
            llm_service: The LLM service configured with an embedding model
        """
        self.llm_service = llm_service

    @property
    def provider_id(self) -> str:
        return f"core_{self.llm_service.service_id}"

    def embed(self, text: str) -> list[float]:
        try:
            response = self.llm_service.embedding(text)
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embedding: {e}") from e

        data = getattr(response, "data", None)
        if not data or not data[0].embedding:
            raise EmbeddingError("Embedding backend returned no vector")

        return list(data[0].embedding)

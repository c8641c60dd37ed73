import logging
from dataclasses import dataclass
from typing import Any

from django_course_assistant.contrib.index import (
    CatalogSource,
    CoreEmbeddingProvider,
    CorpusIndexer,
    CourseDocumentBuilder,
    EmbeddingProvider,
    InMemoryProvider,
    ModelCatalogSource,
    StorageProvider,
)
from django_course_assistant.llm import CoreTextGenerator, LLMService, TextGenerator

from .base import AnswerEngine
from .conf import get_assistant_settings
from .full_context import FullContextChatbot
from .rag import RAGAnswerEngine

logger = logging.getLogger(__name__)


@dataclass
class AssistantContext:
    """Every component the assistant needs, wired together explicitly."""

    source: CatalogSource
    embedding_provider: EmbeddingProvider
    storage_provider: StorageProvider
    indexer: CorpusIndexer
    generator: TextGenerator
    engine: AnswerEngine

    @classmethod
    def build(
        cls,
        *,
        source: CatalogSource,
        embedding_provider: EmbeddingProvider,
        generator: TextGenerator,
        engine: str = "rag",
        top_k: int = 5,
        language: str = "Vietnamese",
        currency: str = "VND",
    ) -> "AssistantContext":
        storage_provider = InMemoryProvider(embedding_provider=embedding_provider)
        indexer = CorpusIndexer(
            source=source,
            storage_provider=storage_provider,
            document_builder=CourseDocumentBuilder(currency=currency),
        )

        answer_engine: AnswerEngine
        if engine == "full_context":
            answer_engine = FullContextChatbot(
                source=source,
                generator=generator,
                language=language,
                currency=currency,
            )
        else:
            answer_engine = RAGAnswerEngine(
                indexer=indexer,
                generator=generator,
                top_k=top_k,
                language=language,
            )

        return cls(
            source=source,
            embedding_provider=embedding_provider,
            storage_provider=storage_provider,
            indexer=indexer,
            generator=generator,
            engine=answer_engine,
        )

    @classmethod
    def from_settings(cls, **overrides: Any) -> "AssistantContext":
        """Build a context from ``settings.COURSE_ASSISTANT``."""
        assistant_settings = {**get_assistant_settings(), **overrides}
        provider = assistant_settings["LLM_PROVIDER"]
        options = assistant_settings["LLM_OPTIONS"]

        logger.debug(
            "Building %s assistant with provider %s",
            assistant_settings["ENGINE"],
            provider,
        )
        embedding_service = LLMService.create(
            provider=provider,
            model=assistant_settings["EMBEDDING_MODEL"],
            **options,
        )
        generation_service = LLMService.create(
            provider=provider,
            model=assistant_settings["GENERATION_MODEL"],
            **options,
        )

        return cls.build(
            source=ModelCatalogSource(),
            embedding_provider=CoreEmbeddingProvider(embedding_service),
            generator=CoreTextGenerator(generation_service),
            engine=assistant_settings["ENGINE"],
            top_k=int(assistant_settings["TOP_K"]),
            language=assistant_settings["RESPONSE_LANGUAGE"],
            currency=assistant_settings["CURRENCY"],
        )

    def invalidate(self):
        self.engine.invalidate()

import logging
from typing import Any

from django_course_assistant.contrib.index import CorpusIndexer, StorageProvider
from django_course_assistant.contrib.index.storage import DEFAULT_TOP_K
from django_course_assistant.llm import Prompt, TextGenerator
from django_course_assistant.llm.prompt import numbered_blocks

from .base import AnswerEngine, AnswerSource
from .prompts import RAG_PROMPT

logger = logging.getLogger(__name__)


class RAGAnswerEngine(AnswerEngine):
    """Answers questions from the documents most similar to them.

    The corpus is built lazily by ``indexer`` on the first question, or
    explicitly through ``initialize()``.
    """

    def __init__(
        self,
        *,
        indexer: CorpusIndexer,
        generator: TextGenerator,
        top_k: int = DEFAULT_TOP_K,
        language: str = "Vietnamese",
        prompt: Prompt = RAG_PROMPT,
    ):
        self.indexer = indexer
        self.generator = generator
        self.top_k = top_k
        self.prompt = prompt.with_tokens(language=language)

    @property
    def storage_provider(self) -> StorageProvider:
        return self.indexer.storage_provider

    def initialize(self):
        self.indexer.rebuild()

    def ensure_initialized(self) -> bool:
        return self.indexer.ensure_indexed()

    def invalidate(self):
        self.indexer.invalidate()

    def build_prompt(
        self, question: str, course_id: int | None = None
    ) -> tuple[str, list[AnswerSource]]:
        self.ensure_initialized()

        filters = {"course_id": course_id} if course_id is not None else None
        results = self.storage_provider.search(question, self.top_k, filters)
        logger.debug(
            "Retrieved %d documents for question (course_id=%s)",
            len(results),
            course_id,
        )

        context = numbered_blocks(result.document.content for result in results)
        sources = [
            AnswerSource(
                course_title=result.document.metadata.course_title,
                content=result.document.content,
                score=result.score,
            )
            for result in results
        ]
        return self.prompt.render(context=context, question=question), sources

    def stats(self) -> dict[str, Any]:
        return {
            "document_count": self.storage_provider.count(),
            "initialized": self.storage_provider.is_initialized(),
        }

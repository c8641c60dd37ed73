import logging
import threading
import uuid

from django_course_assistant.exceptions import DimensionMismatchError

from ..embedding import cosine_similarity
from ..schema import DocumentMetadata, EmbeddedDocument, SearchResult
from .base import BaseStorageQuerySet, StorageProvider

logger = logging.getLogger(__name__)


class InMemoryQuerySet(BaseStorageQuerySet["InMemoryProvider"]):
    def run_query(self):
        embedding, filter_map = self.split_filters()

        candidates = [
            document
            for document in self.storage_provider.documents()
            if document.metadata.matches(filter_map)
        ]
        logger.debug(
            "Scanning %d candidate documents with filters %s",
            len(candidates),
            filter_map,
        )

        results = [
            SearchResult(
                document=document,
                score=cosine_similarity(embedding, document.vector),
            )
            for document in candidates
        ]
        # sorted() is stable, so equal scores keep insertion order
        results = sorted(results, key=lambda result: result.score, reverse=True)

        stop = None if self.limit is None else self.offset + self.limit
        yield from results[self.offset : stop]


class InMemoryProvider(StorageProvider):
    """Ordered in-memory corpus, searched by a linear cosine scan."""

    base_queryset_cls = InMemoryQuerySet

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._documents: list[EmbeddedDocument] = []
        self._initialized = False
        self._lock = threading.Lock()

    def documents(self) -> tuple[EmbeddedDocument, ...]:
        """Snapshot of the corpus in insertion order."""
        with self._lock:
            return tuple(self._documents)

    def add(self, content: str, metadata: DocumentMetadata) -> str:
        """Embed content and append it to the corpus."""
        vector = self.embedding_provider.embed(content)
        document = EmbeddedDocument(
            document_key=uuid.uuid4().hex,
            content=content,
            metadata=metadata,
            vector=vector,
        )

        with self._lock:
            if self._documents and self._documents[0].dimensions != len(vector):
                raise DimensionMismatchError(
                    f"Embedding has {len(vector)} dimensions but the corpus "
                    f"uses {self._documents[0].dimensions}"
                )
            self._documents.append(document)

        return document.document_key

    def clear(self):
        """Clear the corpus."""
        with self._lock:
            self._documents = []
            self._initialized = False

    def count(self) -> int:
        return len(self._documents)

    def is_initialized(self) -> bool:
        return self._initialized

    def set_initialized(self, value: bool):
        self._initialized = value

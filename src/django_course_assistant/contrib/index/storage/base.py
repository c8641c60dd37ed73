from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Iterable, Iterator, Mapping, TypeVar

from queryish import Queryish

from ..embedding import EmbeddingProvider
from ..schema import DocumentMetadata, SearchResult

StorageProviderType = TypeVar("StorageProviderType", bound="StorageProvider")

DEFAULT_TOP_K = 5


class BaseStorageQuerySet(Queryish, Generic[StorageProviderType]):
    """Lazy search over a storage provider.

    Filters are collected with ``.filter()`` and the result window with
    slicing; the scan runs on first iteration. An ``embedding`` filter holding
    the query vector is required, every other filter is an exact match on
    document metadata.
    """

    def __init__(self, storage_provider: StorageProviderType):
        super().__init__()
        self.storage_provider = storage_provider

    def split_filters(self) -> tuple[list[float], dict[str, Any]]:
        filter_map = {key: value for key, value in self.filters}
        embedding = filter_map.pop("embedding", None)
        if embedding is None:
            raise ValueError("embedding filter is required")
        return embedding, filter_map

    def run_query(self) -> Iterator[SearchResult]:
        """Execute the query and return the results."""
        raise NotImplementedError


class StorageProvider(ABC):
    """Base class for corpus storage backends.

    The similarity scan lives in ``base_queryset_cls``; a backend that indexes
    vectors differently only needs to provide its own query set.
    """

    base_queryset_cls: ClassVar[type[BaseStorageQuerySet]]

    def __init__(self, *, embedding_provider: EmbeddingProvider, **kwargs):
        self.embedding_provider = embedding_provider

    @property
    def objects(self) -> BaseStorageQuerySet:
        return self.base_queryset_cls(self)

    @abstractmethod
    def add(self, content: str, metadata: DocumentMetadata) -> str:
        """Embed and store one document, returning its key."""
        pass

    def add_batch(
        self, items: Iterable[tuple[str, DocumentMetadata]]
    ) -> list[str]:
        """Store documents one after another, returning keys in input order."""
        return [self.add(content, metadata) for content, metadata in items]

    def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        filters: Mapping[str, Any] | None = None,
    ) -> list[SearchResult]:
        """Return the ``top_k`` documents most similar to ``query``."""
        if top_k < 0:
            raise ValueError(f"top_k must be zero or greater, got {top_k}")
        if top_k == 0:
            return []

        embedding = self.embedding_provider.embed(query)
        queryset = self.objects.filter(embedding=embedding, **(filters or {}))
        return list(queryset[:top_k])

    @abstractmethod
    def clear(self):
        """Remove every document and mark the corpus as not initialized."""
        ...

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def is_initialized(self) -> bool: ...

    @abstractmethod
    def set_initialized(self, value: bool): ...

from .embedding import (
    CoreEmbeddingProvider,
    EmbeddingProvider,
    cosine_similarity,
)
from .indexer import (
    CorpusIndexer,
    CourseDocumentBuilder,
)
from .schema import (
    ContentMetadata,
    CourseMetadata,
    Document,
    EmbeddedDocument,
    ModuleMetadata,
    SearchResult,
)
from .source import (
    CatalogSource,
    ModelCatalogSource,
)
from .storage import (
    InMemoryProvider,
    StorageProvider,
)

__all__ = [
    "CatalogSource",
    "ContentMetadata",
    "CoreEmbeddingProvider",
    "CorpusIndexer",
    "CourseDocumentBuilder",
    "CourseMetadata",
    "Document",
    "EmbeddedDocument",
    "EmbeddingProvider",
    "InMemoryProvider",
    "ModelCatalogSource",
    "ModuleMetadata",
    "SearchResult",
    "StorageProvider",
    "cosine_similarity",
]

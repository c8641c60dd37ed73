"""
Schema definitions for the course corpus.

Every document in the corpus describes one node of the course hierarchy: a
course, one of its modules, or one content item inside a module. The metadata
attached to a document is a closed union of three dataclasses, one per node
type, so filters and serialisation only ever see a fixed set of fields.
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Literal, Mapping, Union

_MISSING = object()


@dataclass(frozen=True)
class BaseMetadata:
    """Fields shared by every metadata variant."""

    course_id: int
    course_title: str

    type: ClassVar[str]

    def matches(self, filters: Mapping[str, Any] | None) -> bool:
        """Check every filter is an exact match for a field of this metadata.

        A filter naming a field this variant does not have never matches.
        """
        if not filters:
            return True
        for key, value in filters.items():
            if key == "type":
                if self.type != value:
                    return False
                continue
            if getattr(self, key, _MISSING) != value:
                return False
        return True

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class CourseMetadata(BaseMetadata):
    type: ClassVar[Literal["course"]] = "course"

    teacher_name: str = ""
    category: str = ""
    price: Decimal = Decimal(0)


@dataclass(frozen=True)
class ModuleMetadata(BaseMetadata):
    type: ClassVar[Literal["module"]] = "module"

    module_title: str = ""
    module_order: int = 0


@dataclass(frozen=True)
class ContentMetadata(BaseMetadata):
    type: ClassVar[Literal["content"]] = "content"

    module_title: str = ""
    content_title: str = ""
    content_type: str = ""
    content_order: int = 0


DocumentMetadata = Union[CourseMetadata, ModuleMetadata, ContentMetadata]


@dataclass
class Document:
    """
    Represents a fragment of the catalog to be indexed.
    """

    document_key: str
    content: str
    metadata: DocumentMetadata

    def add_embedding(self, embedding: list[float]) -> "EmbeddedDocument":
        """Create a new EmbeddedDocument with the given embedding."""
        return EmbeddedDocument(
            document_key=self.document_key,
            content=self.content,
            metadata=self.metadata,
            vector=embedding,
        )


@dataclass
class EmbeddedDocument(Document):
    """
    Represents a document with its vector embedding, as held by the store.
    """

    vector: list[float] = field(default_factory=list)

    @property
    def dimensions(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class SearchResult:
    document: EmbeddedDocument
    score: float

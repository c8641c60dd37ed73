import logging
import threading
from decimal import Decimal
from typing import Iterator

from django_course_assistant.exceptions import IndexingError

from .schema import (
    ContentMetadata,
    CourseMetadata,
    DocumentMetadata,
    ModuleMetadata,
)
from .source import CatalogSource, ContentRecord, CourseRecord, ModuleRecord
from .storage import StorageProvider

logger = logging.getLogger(__name__)


def format_price(price: Decimal | int, currency: str) -> str:
    """Render a price, or "Free" when it is zero."""
    price = Decimal(str(price))
    if price == 0:
        return "Free"
    if price == price.to_integral_value():
        return f"{int(price):,} {currency}"
    return f"{price:,.2f} {currency}"


class CourseDocumentBuilder:
    """Render catalog records as corpus documents.

    Module and content documents repeat the titles of their parents so each
    fragment can be understood and retrieved on its own.
    """

    def __init__(self, *, currency: str = "VND"):
        self.currency = currency

    def teacher_label(self, course: CourseRecord) -> str:
        teacher = course.teacher
        if not teacher.full_name:
            return teacher.username
        return f"{teacher.full_name} ({teacher.username})"

    def course_document(self, course: CourseRecord) -> tuple[str, CourseMetadata]:
        content = "\n".join(
            [
                f"Course: {course.title}",
                f"Teacher: {self.teacher_label(course)}",
                f"Category: {course.category_name}",
                f"Description: {course.description}",
                f"Price: {format_price(course.price, self.currency)}",
            ]
        )
        return content, CourseMetadata(
            course_id=course.id,
            course_title=course.title,
            teacher_name=course.teacher.display_name,
            category=course.category_name,
            price=course.price,
        )

    def module_document(
        self, course: CourseRecord, module: ModuleRecord
    ) -> tuple[str, ModuleMetadata]:
        content = "\n".join(
            [
                f"Course: {course.title}",
                f"Module: {module.title}",
                f"Order: {module.order}",
            ]
        )
        return content, ModuleMetadata(
            course_id=course.id,
            course_title=course.title,
            module_title=module.title,
            module_order=module.order,
        )

    def content_document(
        self, course: CourseRecord, module: ModuleRecord, item: ContentRecord
    ) -> tuple[str, ContentMetadata]:
        content = "\n".join(
            [
                f"Course: {course.title}",
                f"Module: {module.title}",
                f"Lesson: {item.title}",
                f"Type: {item.content_type}",
                f"Order: {item.order}",
            ]
        )
        return content, ContentMetadata(
            course_id=course.id,
            course_title=course.title,
            module_title=module.title,
            content_title=item.title,
            content_type=item.content_type,
            content_order=item.order,
        )

    def documents_for(
        self, course: CourseRecord
    ) -> Iterator[tuple[str, DocumentMetadata]]:
        """Yield the course document, then each module followed by its contents."""
        yield self.course_document(course)
        for module in course.modules:
            yield self.module_document(course, module)
            for item in module.contents:
                yield self.content_document(course, module, item)


class CorpusIndexer:
    """Builds the store's corpus from the catalog.

    Rebuilds are serialised: concurrent callers that find the store
    uninitialized wait for a single rebuild instead of starting their own.
    """

    def __init__(
        self,
        *,
        source: CatalogSource,
        storage_provider: StorageProvider,
        document_builder: CourseDocumentBuilder | None = None,
    ):
        self.source = source
        self.storage_provider = storage_provider
        self.document_builder = document_builder or CourseDocumentBuilder()
        self.rebuild_count = 0
        self._lock = threading.Lock()
        # Bumped by invalidate(); a rebuild that sees it move is already stale
        self._generation = 0
        self._generation_lock = threading.Lock()

    def rebuild(self) -> int:
        """Clear the store and index the whole catalog again.

        Returns:
            The number of documents in the new corpus

        Raises:
            IndexingError: if the catalog could not be read
            EmbeddingError: if a document could not be embedded
        """
        with self._lock:
            return self._rebuild()

    def ensure_indexed(self) -> bool:
        """Rebuild if the store is not initialized. Returns whether a rebuild ran."""
        if self.storage_provider.is_initialized():
            return False

        with self._lock:
            # Another caller may have finished a rebuild while we waited
            if self.storage_provider.is_initialized():
                return False
            self._rebuild()
            return True

    def invalidate(self):
        """Mark the corpus as stale so the next request rebuilds it."""
        with self._generation_lock:
            self._generation += 1
            self.storage_provider.set_initialized(False)
        logger.info("Course corpus invalidated")

    def _rebuild(self) -> int:
        store = self.storage_provider
        self.rebuild_count += 1
        generation = self._generation

        logger.info("Rebuilding course corpus from source %s", self.source.source_id)
        store.clear()

        try:
            courses = list(self.source.get_courses())
        except Exception as e:
            raise IndexingError(f"Failed to read course catalog: {e}") from e

        if not courses:
            logger.warning("No courses provided by source %s", self.source.source_id)
        else:
            logger.info("Found %d courses to index", len(courses))

        try:
            for course in courses:
                store.add_batch(self.document_builder.documents_for(course))
        except Exception:
            # Never leave a half-built corpus behind
            store.clear()
            raise

        with self._generation_lock:
            if generation != self._generation:
                logger.info(
                    "Catalog changed during rebuild, corpus left uninitialized"
                )
                return store.count()
            store.set_initialized(True)

        logger.info("Course corpus initialized with %d documents", store.count())
        return store.count()

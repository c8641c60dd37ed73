import logging
import threading
from typing import Any

from django_course_assistant.contrib.index.indexer import format_price
from django_course_assistant.contrib.index.source import CatalogSource, CourseRecord
from django_course_assistant.exceptions import IndexingError
from django_course_assistant.llm import Prompt, TextGenerator

from .base import AnswerEngine, AnswerSource
from .prompts import FULL_CONTEXT_PROMPT

logger = logging.getLogger(__name__)


class FullContextChatbot(AnswerEngine):
    """Answers questions with the whole catalog in the prompt.

    Nothing is embedded or retrieved, so nothing relevant can be filtered out,
    but the prompt grows with every course. Suited to small catalogs only.
    """

    supports_course_scope = False

    def __init__(
        self,
        *,
        source: CatalogSource,
        generator: TextGenerator,
        language: str = "Vietnamese",
        currency: str = "VND",
        prompt: Prompt = FULL_CONTEXT_PROMPT,
    ):
        self.source = source
        self.generator = generator
        self.currency = currency
        self.prompt = prompt.with_tokens(language=language)
        self.course_context = ""
        self.course_count = 0
        self.load_count = 0
        self._initialized = False
        self._lock = threading.Lock()
        self._generation = 0
        self._generation_lock = threading.Lock()

    def render_course(self, course: CourseRecord) -> str:
        lines = [
            f"=== COURSE: {course.title} ===",
            f"- ID: {course.id}",
            f"- Teacher: {course.teacher.display_name}",
            f"- Category: {course.category_name}",
            f"- Description: {course.description}",
            f"- Price: {format_price(course.price, self.currency)}",
            f"- Modules: {len(course.modules)}",
        ]
        if course.modules:
            lines.append("")
            lines.append("Modules:")
            for module in course.modules:
                lines.append(
                    f"  {module.order}. {module.title} ({len(module.contents)} lessons)"
                )
                for item in module.contents:
                    lines.append(f"     - {item.title} ({item.content_type})")
        return "\n".join(lines)

    def initialize(self):
        with self._lock:
            self._load()

    def ensure_initialized(self) -> bool:
        if self._initialized:
            return False

        with self._lock:
            if self._initialized:
                return False
            self._load()
            return True

    def invalidate(self):
        with self._generation_lock:
            self._generation += 1
            self._initialized = False
        logger.info("Full course context invalidated")

    def _load(self):
        self.load_count += 1
        generation = self._generation
        logger.info("Loading course data from source %s", self.source.source_id)
        self._initialized = False

        try:
            courses = list(self.source.get_courses())
        except Exception as e:
            raise IndexingError(f"Failed to read course catalog: {e}") from e

        if not courses:
            logger.warning("No courses provided by source %s", self.source.source_id)

        self.course_context = "\n\n".join(
            self.render_course(course) for course in courses
        )
        self.course_count = len(courses)

        with self._generation_lock:
            if generation != self._generation:
                logger.info("Catalog changed while loading, context left stale")
                return
            self._initialized = True

        logger.info(
            "Loaded %d courses into a %d character context",
            self.course_count,
            len(self.course_context),
        )

    def build_prompt(
        self, question: str, course_id: int | None = None
    ) -> tuple[str, list[AnswerSource]]:
        if course_id is not None:
            raise ValueError(f"{self.engine_id} does not support course scoping")

        self.ensure_initialized()
        return (
            self.prompt.render(context=self.course_context, question=question),
            [],
        )

    def stats(self) -> dict[str, Any]:
        return {
            "document_count": self.course_count,
            "initialized": self._initialized,
            "context_length": len(self.course_context),
        }

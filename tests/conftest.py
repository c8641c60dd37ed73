import io
import re
import threading
import time
import zlib
from decimal import Decimal

import pytest
from django.apps import apps

from django_course_assistant.contrib.assistant.context import AssistantContext
from django_course_assistant.contrib.index.embedding import EmbeddingProvider
from django_course_assistant.contrib.index.source import (
    CatalogSource,
    ContentRecord,
    CourseRecord,
    ModuleRecord,
    TeacherRecord,
)
from django_course_assistant.exceptions import EmbeddingError
from django_course_assistant.llm import TextGenerator


class BagOfWordsEmbeddingProvider(EmbeddingProvider):
    """Deterministic embeddings: hashed token counts.

    Identical texts get identical vectors, and texts sharing words point in
    similar directions, which is enough to exercise retrieval.
    """

    def __init__(self, dimensions=64, fail_after=None):
        self.dimensions = dimensions
        self.fail_after = fail_after
        self.calls = []

    def embed(self, text):
        if self.fail_after is not None and len(self.calls) >= self.fail_after:
            raise EmbeddingError("Embedding backend unavailable")
        self.calls.append(text)

        vector = [0.0] * self.dimensions
        for token in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(token.encode()) % self.dimensions] += 1.0
        return vector


class FakeTextGenerator(TextGenerator):
    def __init__(self, chunks=("The ", "TypeScript ", "course ", "costs 49.99 VND.")):
        self.chunks = list(chunks)
        self.prompts = []
        self.pulled = 0
        self.closed = False

    def generate(self, prompt):
        self.prompts.append(prompt)
        return "".join(self.chunks)

    def stream(self, prompt):
        self.prompts.append(prompt)
        try:
            for chunk in self.chunks:
                self.pulled += 1
                yield chunk
        finally:
            self.closed = True


class FakeCatalogSource(CatalogSource):
    def __init__(self, courses=(), delay=0.0, error=None):
        self.courses = list(courses)
        self.delay = delay
        self.error = error
        self.calls = 0
        self._calls_lock = threading.Lock()

    def get_courses(self):
        with self._calls_lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.courses)


TEACHER = TeacherRecord(first_name="Teacher", last_name="User", username="teacher01")

TYPESCRIPT_COURSE = CourseRecord(
    id=1,
    title="Basic TypeScript Course",
    description="Learn TypeScript from basic to advanced in 4 weeks.",
    price=Decimal("49.99"),
    teacher=TEACHER,
    category_name="Programming",
    modules=(
        ModuleRecord(
            id=1,
            title="Chapter 1: TypeScript Introduction",
            order=1,
            contents=(
                ContentRecord(1, "Video: TypeScript Overview", "VIDEO", 1),
                ContentRecord(2, "Document: Environment Setup", "DOCUMENT", 2),
                ContentRecord(3, "Quiz: Chapter 1 Review", "QUIZ", 3),
            ),
        ),
        ModuleRecord(
            id=2,
            title="Chapter 2: Data Types",
            order=2,
            contents=(
                ContentRecord(4, "Video: Basic Data Types", "VIDEO", 1),
                ContentRecord(5, "Document: Union and Intersection", "DOCUMENT", 2),
            ),
        ),
    ),
)

DESIGN_COURSE = CourseRecord(
    id=2,
    title="UI Design Fundamentals",
    description="Colour, typography and layout for beginners.",
    price=Decimal("0"),
    teacher=TeacherRecord(first_name="", last_name="", username="designer"),
    category_name="Design",
    modules=(
        ModuleRecord(
            id=3,
            title="Chapter 1: Colour Theory",
            order=1,
            contents=(ContentRecord(6, "Video: The Colour Wheel", "VIDEO", 1),),
        ),
    ),
)

# course + 2 modules + 5 contents, course + 1 module + 1 content
SAMPLE_DOCUMENT_COUNT = 11


@pytest.fixture
def embedding_provider():
    return BagOfWordsEmbeddingProvider()


@pytest.fixture
def text_generator():
    return FakeTextGenerator()


@pytest.fixture
def catalog_source():
    return FakeCatalogSource([TYPESCRIPT_COURSE, DESIGN_COURSE])


@pytest.fixture
def rag_context(catalog_source, embedding_provider, text_generator):
    return AssistantContext.build(
        source=catalog_source,
        embedding_provider=embedding_provider,
        generator=text_generator,
        language="English",
    )


@pytest.fixture
def full_context(catalog_source, embedding_provider, text_generator):
    return AssistantContext.build(
        source=catalog_source,
        embedding_provider=embedding_provider,
        generator=text_generator,
        engine="full_context",
        language="English",
    )


@pytest.fixture
def installed_context():
    """Install a context on the assistant app for the duration of a test."""
    app_config = apps.get_app_config("course_assistant")

    def install(context):
        app_config.set_context(context)
        return context

    yield install
    app_config.reset_context()


@pytest.fixture
def sample_catalog(db):
    """Load the sample catalog into the database."""
    from django.core.management import call_command

    call_command("create_test_data", stdout=io.StringIO())


class ChangingCatalogSource(FakeCatalogSource):
    """Runs ``on_read`` after taking its snapshot, as if the catalog changed
    while a rebuild was still working from the old data."""

    def __init__(self, courses=(), on_read=None):
        super().__init__(courses)
        self.on_read = on_read

    def get_courses(self):
        snapshot = super().get_courses()
        on_read, self.on_read = self.on_read, None
        if on_read is not None:
            on_read()
        return snapshot

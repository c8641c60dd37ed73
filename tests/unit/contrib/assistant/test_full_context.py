import threading

import pytest
from conftest import (
    DESIGN_COURSE,
    TYPESCRIPT_COURSE,
    ChangingCatalogSource,
    FakeCatalogSource,
    FakeTextGenerator,
)

from django_course_assistant.contrib.assistant import FullContextChatbot
from django_course_assistant.exceptions import IndexingError


@pytest.fixture
def chatbot(full_context):
    return full_context.engine


def test_engine_type(chatbot):
    assert isinstance(chatbot, FullContextChatbot)
    assert chatbot.supports_course_scope is False


def test_render_course(chatbot):
    assert chatbot.render_course(TYPESCRIPT_COURSE) == (
        "=== COURSE: Basic TypeScript Course ===\n"
        "- ID: 1\n"
        "- Teacher: Teacher User\n"
        "- Category: Programming\n"
        "- Description: Learn TypeScript from basic to advanced in 4 weeks.\n"
        "- Price: 49.99 VND\n"
        "- Modules: 2\n"
        "\n"
        "Modules:\n"
        "  1. Chapter 1: TypeScript Introduction (3 lessons)\n"
        "     - Video: TypeScript Overview (VIDEO)\n"
        "     - Document: Environment Setup (DOCUMENT)\n"
        "     - Quiz: Chapter 1 Review (QUIZ)\n"
        "  2. Chapter 2: Data Types (2 lessons)\n"
        "     - Video: Basic Data Types (VIDEO)\n"
        "     - Document: Union and Intersection (DOCUMENT)"
    )


def test_render_free_course(chatbot):
    rendered = chatbot.render_course(DESIGN_COURSE)

    assert "- Teacher: designer\n" in rendered
    assert "- Price: Free\n" in rendered


def test_answer_uses_whole_catalog(chatbot, text_generator, embedding_provider):
    answer = chatbot.answer("Which courses are available?")

    assert answer.answer == "The TypeScript course costs 49.99 VND."
    assert answer.sources == []
    prompt = text_generator.prompts[0]
    assert "=== COURSE: Basic TypeScript Course ===" in prompt
    assert "=== COURSE: UI Design Fundamentals ===" in prompt
    assert "QUESTION: Which courses are available?" in prompt
    assert "answer in English" in prompt
    assert embedding_provider.calls == []


def test_lazy_initialization(chatbot, catalog_source):
    assert chatbot.stats()["initialized"] is False

    chatbot.answer("Hello")
    chatbot.answer("Which courses are free?")

    assert catalog_source.calls == 1
    assert chatbot.load_count == 1


def test_stats(chatbot):
    chatbot.initialize()
    stats = chatbot.stats()

    assert stats["document_count"] == 2
    assert stats["initialized"] is True
    assert stats["context_length"] == len(chatbot.course_context)


def test_stream_matches_answer(chatbot):
    streamed = "".join(chatbot.answer_stream("Which courses are free?"))
    assert streamed == chatbot.answer("Which courses are free?").answer


def test_course_scope_is_rejected(chatbot, text_generator):
    with pytest.raises(ValueError):
        chatbot.answer("Which courses are free?", course_id=1)
    assert text_generator.prompts == []


def test_invalidate_reloads(chatbot, catalog_source):
    chatbot.answer("Hello")
    catalog_source.courses = [DESIGN_COURSE]

    chatbot.invalidate()
    chatbot.answer("Hello")

    assert catalog_source.calls == 2
    assert "Basic TypeScript Course" not in chatbot.course_context


def test_catalog_failure():
    chatbot = FullContextChatbot(
        source=FakeCatalogSource(error=RuntimeError("db is down")),
        generator=FakeTextGenerator(),
    )

    with pytest.raises(IndexingError):
        chatbot.answer("Hello")
    assert chatbot.stats()["initialized"] is False


def test_empty_catalog():
    chatbot = FullContextChatbot(
        source=FakeCatalogSource([]), generator=FakeTextGenerator()
    )
    chatbot.initialize()

    assert chatbot.stats() == {
        "document_count": 0,
        "initialized": True,
        "context_length": 0,
    }


def test_concurrent_first_requests_load_once():
    source = FakeCatalogSource([TYPESCRIPT_COURSE], delay=0.05)
    chatbot = FullContextChatbot(source=source, generator=FakeTextGenerator())
    start = threading.Barrier(6)

    def first_request():
        start.wait()
        chatbot.answer("Hello")

    threads = [threading.Thread(target=first_request) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert source.calls == 1
    assert chatbot.load_count == 1


def test_change_during_load_is_not_lost():
    source = ChangingCatalogSource([TYPESCRIPT_COURSE])
    chatbot = FullContextChatbot(source=source, generator=FakeTextGenerator())

    def add_course():
        source.courses = [TYPESCRIPT_COURSE, DESIGN_COURSE]
        chatbot.invalidate()

    source.on_read = add_course
    chatbot.answer("Hello")

    assert chatbot.stats()["initialized"] is False

    chatbot.answer("Hello")

    assert chatbot.load_count == 2
    assert chatbot.stats()["initialized"] is True
    assert "=== COURSE: UI Design Fundamentals ===" in chatbot.course_context

from decimal import Decimal

import pytest

from django_course_assistant.contrib.index import (
    ContentMetadata,
    CourseMetadata,
    Document,
    ModuleMetadata,
)

COURSE = CourseMetadata(
    course_id=1,
    course_title="Basic TypeScript Course",
    teacher_name="Teacher User",
    category="Programming",
    price=Decimal("49.99"),
)
MODULE = ModuleMetadata(
    course_id=1,
    course_title="Basic TypeScript Course",
    module_title="Chapter 1: TypeScript Introduction",
    module_order=1,
)
CONTENT = ContentMetadata(
    course_id=1,
    course_title="Basic TypeScript Course",
    module_title="Chapter 1: TypeScript Introduction",
    content_title="Video: TypeScript Overview",
    content_type="VIDEO",
    content_order=1,
)


def test_type_tags():
    assert [COURSE.type, MODULE.type, CONTENT.type] == ["course", "module", "content"]


@pytest.mark.parametrize("metadata", [COURSE, MODULE, CONTENT])
def test_no_filters_match_everything(metadata):
    assert metadata.matches(None)
    assert metadata.matches({})


def test_matches_on_shared_fields():
    assert COURSE.matches({"course_id": 1})
    assert CONTENT.matches({"course_id": 1, "content_type": "VIDEO"})
    assert not MODULE.matches({"course_id": 2})


def test_matches_on_type():
    assert MODULE.matches({"type": "module"})
    assert not CONTENT.matches({"type": "module", "course_id": 1})


def test_field_missing_from_variant_never_matches():
    assert not MODULE.matches({"content_type": "VIDEO"})
    assert not COURSE.matches({"unknown": None})


def test_as_dict_includes_type():
    assert MODULE.as_dict() == {
        "type": "module",
        "course_id": 1,
        "course_title": "Basic TypeScript Course",
        "module_title": "Chapter 1: TypeScript Introduction",
        "module_order": 1,
    }


def test_metadata_is_immutable():
    with pytest.raises(AttributeError):
        COURSE.course_id = 2


def test_add_embedding():
    document = Document(document_key="abc", content="Course: TS", metadata=COURSE)
    embedded = document.add_embedding([0.1, 0.2])

    assert embedded.document_key == "abc"
    assert embedded.metadata is COURSE
    assert embedded.dimensions == 2

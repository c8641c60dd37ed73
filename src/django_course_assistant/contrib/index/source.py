from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Protocol, runtime_checkable


@dataclass(frozen=True)
class TeacherRecord:
    first_name: str
    last_name: str
    username: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


@dataclass(frozen=True)
class ContentRecord:
    id: int
    title: str
    content_type: str
    order: int


@dataclass(frozen=True)
class ModuleRecord:
    id: int
    title: str
    order: int
    contents: tuple[ContentRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CourseRecord:
    id: int
    title: str
    description: str
    price: Decimal
    teacher: TeacherRecord
    category_name: str
    modules: tuple[ModuleRecord, ...] = field(default_factory=tuple)


@runtime_checkable
class CatalogSource(Protocol):
    """Read-only access to the course hierarchy."""

    @property
    def source_id(self) -> str:
        return self.__class__.__name__

    def get_courses(self) -> Iterable[CourseRecord]:
        """Get every course with its teacher, category, modules and contents."""
        ...


class ModelCatalogSource(CatalogSource):
    """Catalog source backed by the ``course_catalog`` Django models."""

    def __init__(self, queryset=None):
        self._queryset = queryset

    def get_queryset(self):
        if self._queryset is not None:
            return self._queryset.all()

        from django_course_assistant.contrib.catalog.models import Course

        return Course.objects.select_related("teacher", "category").prefetch_related(
            "modules__contents"
        )

    @property
    def source_id(self) -> str:
        return "course_catalog.Course"

    def get_courses(self) -> list[CourseRecord]:
        # Materialise inside this call so the single catalog read happens here
        return [self.course_to_record(course) for course in self.get_queryset()]

    @staticmethod
    def course_to_record(course) -> CourseRecord:
        teacher = course.teacher
        return CourseRecord(
            id=course.pk,
            title=course.title,
            description=course.description,
            price=course.price,
            teacher=TeacherRecord(
                first_name=teacher.first_name,
                last_name=teacher.last_name,
                username=teacher.get_username(),
            ),
            category_name=course.category.name,
            modules=tuple(
                ModuleRecord(
                    id=module.pk,
                    title=module.title,
                    order=module.order,
                    contents=tuple(
                        ContentRecord(
                            id=content.pk,
                            title=content.title,
                            content_type=content.content_type,
                            order=content.order,
                        )
                        for content in module.contents.all()
                    ),
                )
                for module in course.modules.all()
            ),
        )

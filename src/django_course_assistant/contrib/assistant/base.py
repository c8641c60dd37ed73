import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Iterator

from django_course_assistant.exceptions import QuestionValidationError
from django_course_assistant.llm import TextGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerSource:
    course_title: str
    content: str
    score: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Answer:
    answer: str
    sources: list[AnswerSource] = field(default_factory=list)


class CancellationToken:
    """Signals a streaming answer to stop pulling chunks from the backend."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def validate_question(question: object) -> str:
    if not isinstance(question, str) or not question.strip():
        raise QuestionValidationError("Question is required and must be a string")
    return question


class AnswerEngine(ABC):
    """Base class for engines that answer questions about the course catalog."""

    generator: TextGenerator
    supports_course_scope: bool = True

    @property
    def engine_id(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def initialize(self):
        """Load the catalog now instead of on the first question."""

    @abstractmethod
    def ensure_initialized(self) -> bool:
        """Load the catalog if needed. Returns whether loading ran."""

    @abstractmethod
    def invalidate(self):
        """Forget the loaded catalog so the next question reloads it."""

    @abstractmethod
    def build_prompt(
        self, question: str, course_id: int | None = None
    ) -> tuple[str, list[AnswerSource]]:
        """Prepare the prompt for a question along with the sources it cites."""

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return ``document_count`` and ``initialized`` plus engine specifics."""

    def answer(self, question: str, course_id: int | None = None) -> Answer:
        question = validate_question(question)
        prompt, sources = self.build_prompt(question, course_id)
        return Answer(answer=self.generator.generate(prompt), sources=sources)

    def answer_stream(
        self,
        question: str,
        course_id: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> Iterator[str]:
        """Yield answer chunks as the backend produces them.

        Nothing is buffered. Closing the returned generator, or cancelling
        ``cancel_token``, closes the backend stream before the next chunk is
        pulled.
        """
        question = validate_question(question)
        prompt, _ = self.build_prompt(question, course_id)
        return self._stream_chunks(prompt, cancel_token)

    def _stream_chunks(
        self, prompt: str, cancel_token: CancellationToken | None
    ) -> Iterator[str]:
        if cancel_token is not None and cancel_token.cancelled:
            return

        chunks = self.generator.stream(prompt)
        try:
            for chunk in chunks:
                if chunk:
                    yield chunk
                if cancel_token is not None and cancel_token.cancelled:
                    logger.info("Answer stream cancelled by consumer")
                    break
        finally:
            close = getattr(chunks, "close", None)
            if close is not None:
                close()

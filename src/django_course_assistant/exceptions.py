class AssistantError(Exception):
    """Base class for errors raised by the course assistant."""

    code = "assistant_error"


class QuestionValidationError(AssistantError, ValueError):
    """The question is missing or is not a non-empty string."""

    code = "invalid_question"


class EmbeddingError(AssistantError):
    """The embedding backend failed or returned no vector."""

    code = "embedding_failed"


class DimensionMismatchError(EmbeddingError):
    """Two vectors that must be compared have different lengths."""

    code = "dimension_mismatch"


class GenerationError(AssistantError):
    """The text generation backend failed."""

    code = "generation_failed"


class IndexingError(AssistantError):
    """The course catalog could not be read while rebuilding the corpus."""

    code = "indexing_failed"

from .base import (
    Answer,
    AnswerEngine,
    AnswerSource,
    CancellationToken,
)
from .full_context import FullContextChatbot
from .rag import RAGAnswerEngine

__all__ = [
    "Answer",
    "AnswerEngine",
    "AnswerSource",
    "CancellationToken",
    "FullContextChatbot",
    "RAGAnswerEngine",
]

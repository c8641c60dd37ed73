from .base import LLMService
from .generation import CoreTextGenerator, TextGenerator
from .prompt import Prompt

__all__ = [
    "CoreTextGenerator",
    "LLMService",
    "Prompt",
    "TextGenerator",
]

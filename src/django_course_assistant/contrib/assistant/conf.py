from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULTS: dict[str, Any] = {
    "ENGINE": "rag",
    "LLM_PROVIDER": "ollama",
    "LLM_OPTIONS": {"api_base": "http://127.0.0.1:11434"},
    "EMBEDDING_MODEL": "gemma3:4b",
    "GENERATION_MODEL": "gemma3:4b",
    "TOP_K": 5,
    "RESPONSE_LANGUAGE": "Vietnamese",
    "CURRENCY": "VND",
    "INVALIDATE_ON_CATALOG_CHANGE": True,
}

ENGINES = ("rag", "full_context")


def get_assistant_settings() -> dict[str, Any]:
    """Return the ``COURSE_ASSISTANT`` setting merged over the defaults."""
    overrides = getattr(settings, "COURSE_ASSISTANT", None) or {}

    unknown = sorted(set(overrides) - set(DEFAULTS))
    if unknown:
        raise ImproperlyConfigured(
            f"Unknown COURSE_ASSISTANT settings: {', '.join(unknown)}"
        )

    assistant_settings = {**DEFAULTS, **overrides}

    if assistant_settings["ENGINE"] not in ENGINES:
        raise ImproperlyConfigured(
            f"COURSE_ASSISTANT['ENGINE'] must be one of {ENGINES}, "
            f"got {assistant_settings['ENGINE']!r}"
        )
    if int(assistant_settings["TOP_K"]) < 0:
        raise ImproperlyConfigured("COURSE_ASSISTANT['TOP_K'] must not be negative")

    return assistant_settings

import threading

from django.apps import AppConfig


class AssistantConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "django_course_assistant.contrib.assistant"
    label = "course_assistant"
    verbose_name = "Course Q&A assistant"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._context = None
        self._context_lock = threading.Lock()

    def ready(self):
        from . import signals

        signals.connect_catalog_signals()

    def get_context(self):
        """Return the process-wide assistant context, building it on first use."""
        if self._context is None:
            with self._context_lock:
                if self._context is None:
                    from .context import AssistantContext

                    self._context = AssistantContext.from_settings()
        return self._context

    def set_context(self, context):
        with self._context_lock:
            self._context = context

    def reset_context(self):
        self.set_context(None)

    def has_context(self) -> bool:
        return self._context is not None

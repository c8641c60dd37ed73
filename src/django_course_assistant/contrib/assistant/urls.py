from django.urls import path

from .views import AskStreamView, AskView, InitializeView, StatsView


def assistant_urls(context=None) -> list:
    """
    Generate URL patterns for the course assistant.

    Args:
        context: Optional AssistantContext to serve instead of the app's own

    Example:
        # In your main urls.py
        from django_course_assistant.contrib.assistant.urls import assistant_urls

        urlpatterns = [
            # ... your other URLs
            path("api/", include(assistant_urls())),
        ]
    """
    kwargs = {"context": context} if context is not None else {}
    return [
        path(
            "chatbot/initialize/",
            InitializeView.as_view(**kwargs),
            name="chatbot_initialize",
        ),
        path("chatbot/ask/", AskView.as_view(**kwargs), name="chatbot_ask"),
        path(
            "chatbot/ask/stream/",
            AskStreamView.as_view(**kwargs),
            name="chatbot_ask_stream",
        ),
        path("chatbot/stats/", StatsView.as_view(**kwargs), name="chatbot_stats"),
    ]

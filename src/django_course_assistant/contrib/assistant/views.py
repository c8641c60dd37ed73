import json
import logging
from typing import TYPE_CHECKING, Any, Iterator

from django.apps import apps
from django.http import JsonResponse, StreamingHttpResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from django_course_assistant.exceptions import AssistantError, QuestionValidationError

from .base import Answer, CancellationToken

if TYPE_CHECKING:
    from .context import AssistantContext

logger = logging.getLogger(__name__)

STREAM_DONE = "data: [DONE]\n\n"


class InvalidRequest(Exception):
    pass


def sse_event(payload: Any) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def stats_as_json(stats: dict[str, Any]) -> dict[str, Any]:
    data = {
        "documentCount": stats["document_count"],
        "initialized": stats["initialized"],
    }
    if "context_length" in stats:
        data["contextLength"] = stats["context_length"]
    return data


def answer_as_json(answer: Answer) -> dict[str, Any]:
    return {
        "answer": answer.answer,
        "sources": [
            {
                "courseTitle": source.course_title,
                "content": source.content,
                "score": source.score,
            }
            for source in answer.sources
        ],
    }


@method_decorator(csrf_exempt, name="dispatch")
class AssistantView(View):
    # An explicit context may be passed to as_view(); otherwise the app's is used
    context: "AssistantContext | None" = None

    def get_context(self) -> "AssistantContext":
        if self.context is not None:
            return self.context
        return apps.get_app_config("course_assistant").get_context()

    def error_response(self, error: str, exc: Exception, status: int = 500):
        return JsonResponse({"error": error, "details": str(exc)}, status=status)

    def parse_question(self, request) -> tuple[str, int | None]:
        """
        Read the question from the JSON body.

        Expected JSON payload:
        {
            "question": "Which courses are free?",
            "courseId": 1
        }
        """
        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidRequest("Invalid JSON in request body") from e

        if not isinstance(data, dict):
            raise InvalidRequest("Request body must be a JSON object")

        question = data.get("question")
        if not question or not isinstance(question, str) or not question.strip():
            raise InvalidRequest("Question is required and must be a string")

        course_id = data.get("courseId")
        if course_id is not None and (
            isinstance(course_id, bool) or not isinstance(course_id, int)
        ):
            raise InvalidRequest("courseId must be an integer")

        engine = self.get_context().engine
        if course_id is not None and not engine.supports_course_scope:
            raise InvalidRequest("This assistant does not support courseId")

        return question, course_id


class InitializeView(AssistantView):
    def post(self, request):
        engine = self.get_context().engine
        try:
            engine.initialize()
        except AssistantError as e:
            logger.exception("Error initializing chatbot")
            return self.error_response("Failed to initialize chatbot", e)

        return JsonResponse(
            {
                "message": "Chatbot initialized successfully",
                "stats": stats_as_json(engine.stats()),
            }
        )


class AskView(AssistantView):
    def post(self, request):
        try:
            question, course_id = self.parse_question(request)
        except InvalidRequest as e:
            return JsonResponse({"error": str(e)}, status=400)

        try:
            answer = self.get_context().engine.answer(question, course_id)
        except QuestionValidationError as e:
            return JsonResponse({"error": str(e)}, status=400)
        except AssistantError as e:
            logger.exception("Error generating answer")
            return self.error_response("Failed to generate answer", e)

        return JsonResponse(answer_as_json(answer))


class AskStreamView(AssistantView):
    def post(self, request):
        try:
            question, course_id = self.parse_question(request)
        except InvalidRequest as e:
            return JsonResponse({"error": str(e)}, status=400)

        cancel_token = CancellationToken()
        try:
            chunks = self.get_context().engine.answer_stream(
                question, course_id, cancel_token=cancel_token
            )
        except QuestionValidationError as e:
            return JsonResponse({"error": str(e)}, status=400)
        except AssistantError as e:
            logger.exception("Error streaming answer")
            return self.error_response("Failed to stream answer", e)

        response = StreamingHttpResponse(
            self.event_stream(chunks, cancel_token),
            content_type="text/event-stream",
        )
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response

    def event_stream(
        self, chunks: Iterator[str], cancel_token: CancellationToken
    ) -> Iterator[str]:
        try:
            for chunk in chunks:
                yield sse_event({"chunk": chunk})
            yield STREAM_DONE
        except AssistantError as e:
            # Headers are already sent, so report the failure in-band
            logger.exception("Error streaming answer")
            yield sse_event({"error": "Failed to stream answer", "details": str(e)})
        finally:
            # Runs on completion and when the server closes a disconnected stream
            cancel_token.cancel()
            close = getattr(chunks, "close", None)
            if close is not None:
                close()


class StatsView(AssistantView):
    def get(self, request):
        return JsonResponse(stats_as_json(self.get_context().engine.stats()))

"""
Django management command to query the course assistant from the shell.

Without a question it builds the corpus and reports on it, which is a quick
way to check that the catalog can be read and embedded.
"""

import logging
import time

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from django_course_assistant.contrib.assistant.conf import ENGINES
from django_course_assistant.contrib.assistant.context import AssistantContext
from django_course_assistant.exceptions import AssistantError

logger = logging.getLogger("django_course_assistant")


class Command(BaseCommand):
    help = "Ask the course assistant a question, or build its corpus"

    def add_arguments(self, parser):
        parser.add_argument(
            "question",
            nargs="?",
            help="Question to ask (if not specified, only builds the corpus)",
        )
        parser.add_argument(
            "--course-id",
            type=int,
            help="Only retrieve documents belonging to this course",
        )
        parser.add_argument(
            "--stream",
            action="store_true",
            help="Print the answer as it is generated",
        )
        parser.add_argument(
            "--engine",
            choices=ENGINES,
            help="Answer engine to use instead of the configured one",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Enable verbose output",
        )

    def get_context(self, engine: str | None) -> AssistantContext:
        overrides = {"ENGINE": engine} if engine else {}
        return AssistantContext.from_settings(**overrides)

    def handle(self, *args, **options):
        question = options.get("question")
        course_id = options.get("course_id")
        verbose = options["verbose"]

        previous_level = logger.level
        if verbose:
            logger.setLevel(logging.DEBUG)
        try:
            self._handle(question, course_id, verbose, options)
        finally:
            logger.setLevel(previous_level)

    def _handle(self, question, course_id, verbose, options):
        context = self.get_context(options.get("engine"))
        engine = context.engine

        if course_id is not None and not engine.supports_course_scope:
            raise CommandError(f"{engine.engine_id} does not support --course-id")

        start_time = time.time()
        try:
            if question:
                self._ask(engine, question, course_id, options["stream"])
            else:
                self._build(engine)
        except AssistantError as e:
            if verbose:
                import traceback

                self.stdout.write(traceback.format_exc())
            raise CommandError(f"Course assistant failed: {e}") from e

        elapsed_time = time.time() - start_time
        self.stdout.write(f"Total time: {elapsed_time:.2f} seconds")

    def _build(self, engine):
        self.stdout.write(self.style.SUCCESS(f"Building {engine.engine_id}..."))
        self.stdout.write(f"Started at: {timezone.now()}")

        engine.initialize()
        stats = engine.stats()

        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("=== Build Summary ==="))
        self.stdout.write(f"Documents: {stats['document_count']}")
        if "context_length" in stats:
            self.stdout.write(f"Context length: {stats['context_length']}")
        self.stdout.write(f"Completed at: {timezone.now()}")

    def _ask(self, engine, question, course_id, stream):
        if stream:
            for chunk in engine.answer_stream(question, course_id):
                self.stdout.write(chunk, ending="")
                self.stdout.flush()
            self.stdout.write("")
            return

        answer = engine.answer(question, course_id)
        self.stdout.write(answer.answer)

        if answer.sources:
            self.stdout.write("")
            self.stdout.write(self.style.SUCCESS("Sources:"))
            for source in answer.sources:
                self.stdout.write(f"  - {source.course_title} ({source.score:.3f})")

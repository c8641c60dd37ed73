import logging

from django.apps import apps
from django.db import transaction
from django.db.models.signals import post_delete, post_save

from .conf import get_assistant_settings

logger = logging.getLogger(__name__)

CATALOG_APP = "django_course_assistant.contrib.catalog"


def invalidate_assistant(sender, instance, **kwargs):
    """When catalog data changes, make the next question rebuild the corpus."""
    app_config = apps.get_app_config("course_assistant")

    # Nothing has been loaded yet, so there is nothing to invalidate
    if not app_config.has_context():
        return

    logger.debug("%s changed, invalidating course assistant", sender.__name__)
    context = app_config.get_context()
    context.invalidate()
    # A rebuild started before the commit cannot see this change yet
    transaction.on_commit(context.invalidate, using=kwargs.get("using"))


def connect_catalog_signals():
    if not get_assistant_settings()["INVALIDATE_ON_CATALOG_CHANGE"]:
        return
    if not apps.is_installed(CATALOG_APP):
        return

    from django_course_assistant.contrib.catalog.models import (
        Category,
        Content,
        Course,
        Module,
    )

    for model in (Category, Course, Module, Content):
        uid = f"course_assistant_invalidate_{model._meta.label_lower}"
        post_save.connect(
            invalidate_assistant, sender=model, dispatch_uid=f"{uid}_save"
        )
        post_delete.connect(
            invalidate_assistant, sender=model, dispatch_uid=f"{uid}_delete"
        )

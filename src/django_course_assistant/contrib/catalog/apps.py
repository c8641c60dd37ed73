from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "django_course_assistant.contrib.catalog"
    label = "course_catalog"
    verbose_name = "Course catalog"

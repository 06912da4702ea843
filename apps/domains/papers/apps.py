# apps/domains/papers/apps.py
from django.apps import AppConfig


class PapersDomainConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.domains.papers"
    label = "papers"

"""Django app configuration for Tailorman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class TailormanConfig(AppConfig):
    """Configuration for Tailorman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tailorman"
    verbose_name = _("Garment Tracking")

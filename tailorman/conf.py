"""
Tailorman configuration.

Usage in settings.py:
    TAILORMAN = {
        "ALLOCATION_MAX_ATTEMPTS": 3,
        "UNIVERSAL_LENGTH": 36,
        "ENFORCE_WASH_BIN_MATCH": True,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class TailormanSettings:
    """Tailorman configuration settings."""

    # Conditional-update attempts before ALLOCATION_CONFLICT is raised
    ALLOCATION_MAX_ATTEMPTS: int = 3

    # Length of universal (uncut) production units
    UNIVERSAL_LENGTH: int = 36

    # Wash bins tagged with a wash only accept units whose order targets it
    ENFORCE_WASH_BIN_MATCH: bool = True

    # Finishing defaults for new orders
    DEFAULT_HEM_TYPE: str = "ORL"
    DEFAULT_BUTTON_COLOR: str = "WHITE"


def get_tailorman_settings() -> TailormanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "TAILORMAN", {})
    return TailormanSettings(**{
        k: v for k, v in user_settings.items()
        if k in TailormanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_tailorman_settings(), name)


tailorman_settings = _LazySettings()

"""Service layer helpers for the seedshotter."""

from .seedshot_service import SeedshotService
from .settings_service import SettingsService

__all__ = [
    "SeedshotService",
    "SettingsService",
]

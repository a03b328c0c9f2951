"""
Preference-gated notification policy.

Decides whether a notification of a given type may be shown to a user and
for how long, based on their settings.
"""
import enum
from typing import Any

DEFAULT_DURATION_SECONDS = 2.0
MIN_DURATION_SECONDS = 1.0
MAX_DURATION_SECONDS = 2.5


class NotificationType(str, enum.Enum):
    EXPIRATION = "expiration"
    NEW_KEY = "new_key"
    LOGIN = "login"
    GENERAL = "general"


def is_notification_allowed(settings: Any, notification_type: NotificationType) -> bool:
    """
    Check whether a notification may be shown.

    Args:
        settings: Object exposing the user's notification preferences
        notification_type: Kind of notification

    Returns:
        False when notifications are globally disabled, otherwise the
        per-type preference (general notifications are always allowed)
    """
    if not settings.notifications:
        return False

    if notification_type == NotificationType.EXPIRATION:
        return bool(settings.notify_expiration)
    if notification_type == NotificationType.NEW_KEY:
        return bool(settings.notify_new_key)
    if notification_type == NotificationType.LOGIN:
        return bool(settings.notify_login)
    return True


def get_notification_duration(settings: Any) -> int:
    """Display duration in milliseconds, clamped to 1-2.5 seconds."""
    duration = settings.notification_duration or DEFAULT_DURATION_SECONDS
    duration = max(MIN_DURATION_SECONDS, min(MAX_DURATION_SECONDS, duration))
    return int(duration * 1000)

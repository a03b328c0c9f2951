"""
Tests for preference-gated notifications.
"""
from types import SimpleNamespace

from app.core.notifications import NotificationType, get_notification_duration, is_notification_allowed


def make_settings(**overrides):
    values = {
        "notifications": True,
        "notify_expiration": True,
        "notify_new_key": True,
        "notify_login": True,
        "notification_duration": 2.0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestIsNotificationAllowed:
    """Tests for notification gating."""

    def test_all_allowed_by_default(self):
        settings = make_settings()

        assert all(is_notification_allowed(settings, t) for t in NotificationType)

    def test_global_switch_blocks_everything(self):
        settings = make_settings(notifications=False)

        assert not any(is_notification_allowed(settings, t) for t in NotificationType)

    def test_per_type_flags(self):
        settings = make_settings(notify_expiration=False, notify_login=False)

        assert is_notification_allowed(settings, NotificationType.EXPIRATION) is False
        assert is_notification_allowed(settings, NotificationType.LOGIN) is False
        assert is_notification_allowed(settings, NotificationType.NEW_KEY) is True

    def test_general_ignores_type_flags(self):
        settings = make_settings(notify_expiration=False, notify_new_key=False, notify_login=False)

        assert is_notification_allowed(settings, NotificationType.GENERAL) is True


class TestNotificationDuration:
    """Tests for duration clamping."""

    def test_default_two_seconds(self):
        assert get_notification_duration(make_settings()) == 2000

    def test_missing_duration_uses_default(self):
        assert get_notification_duration(make_settings(notification_duration=None)) == 2000

    def test_clamped_to_minimum(self):
        assert get_notification_duration(make_settings(notification_duration=0.2)) == 1000

    def test_clamped_to_maximum(self):
        assert get_notification_duration(make_settings(notification_duration=9)) == 2500

    def test_fractional_value(self):
        assert get_notification_duration(make_settings(notification_duration=1.5)) == 1500

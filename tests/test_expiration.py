"""
Tests for expiration computations and provider detection.
"""
from datetime import datetime, timedelta, timezone

from app.core.expiration import (
    ExpirationState,
    add_months,
    days_until_expiration,
    default_key_metadata,
    detect_provider,
    expiration_status,
    is_expired,
    to_naive_utc,
)

NOW = datetime(2026, 3, 10, 12, 0, 0)


class TestDaysUntilExpiration:
    """Tests for the remaining-days computation."""

    def test_none_without_expiration(self):
        assert days_until_expiration(None, NOW) is None

    def test_rounds_partial_days_up(self):
        """Half a day left still counts as one day."""
        assert days_until_expiration(NOW + timedelta(hours=12), NOW) == 1

    def test_exact_days(self):
        assert days_until_expiration(NOW + timedelta(days=10), NOW) == 10

    def test_past_date_is_negative(self):
        assert days_until_expiration(NOW - timedelta(days=3), NOW) == -3

    def test_aware_datetime_normalized(self):
        """Aware datetimes are compared in UTC."""
        expires = datetime(2026, 3, 12, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert days_until_expiration(expires, NOW) == 2


class TestIsExpired:
    """Tests for the expired boundary."""

    def test_zero_days_is_expired(self):
        """A key expiring right now is expired."""
        assert is_expired(NOW, NOW) is True

    def test_past_is_expired(self):
        assert is_expired(NOW - timedelta(seconds=1), NOW) is True

    def test_future_not_expired(self):
        assert is_expired(NOW + timedelta(minutes=1), NOW) is False

    def test_no_expiration_never_expires(self):
        assert is_expired(None, NOW) is False


class TestExpirationStatus:
    """Tests for badge classification."""

    def test_expired(self):
        status = expiration_status(NOW - timedelta(days=1), 30, NOW)

        assert status.state == ExpirationState.EXPIRED
        assert status.label == "Expired"
        assert status.color == "red"

    def test_expiring_soon_singular_label(self):
        status = expiration_status(NOW + timedelta(hours=5), 30, NOW)

        assert status.state == ExpirationState.EXPIRING_SOON
        assert status.label == "Expires in 1 day"
        assert status.color == "yellow"

    def test_expiring_soon_at_threshold(self):
        """Exactly threshold days left is still expiring soon."""
        status = expiration_status(NOW + timedelta(days=30), 30, NOW)

        assert status.state == ExpirationState.EXPIRING_SOON
        assert status.label == "Expires in 30 days"

    def test_valid_beyond_threshold(self):
        status = expiration_status(NOW + timedelta(days=31), 30, NOW)

        assert status.state == ExpirationState.VALID
        assert status.color == "green"
        assert status.days_until_expiration == 31

    def test_threshold_is_respected(self):
        """A smaller threshold turns expiring keys valid."""
        status = expiration_status(NOW + timedelta(days=10), 7, NOW)

        assert status.state == ExpirationState.VALID

    def test_no_expiration(self):
        status = expiration_status(None, 30, NOW)

        assert status.state == ExpirationState.NO_EXPIRATION
        assert status.days_until_expiration is None
        assert status.color == "gray"


class TestAddMonths:
    """Tests for calendar month arithmetic."""

    def test_simple(self):
        assert add_months(datetime(2026, 1, 15), 3) == datetime(2026, 4, 15)

    def test_year_rollover(self):
        assert add_months(datetime(2026, 11, 2), 3) == datetime(2027, 2, 2)

    def test_day_clamped_to_month_end(self):
        """Nov 30 + 3 months lands on the last day of February."""
        assert add_months(datetime(2026, 11, 30), 3) == datetime(2027, 2, 28)


class TestProviderDetection:
    """Tests for provider inference and default metadata."""

    def test_openai_prefix(self):
        assert detect_provider("sk-proj-abc123") == "openai"

    def test_unknown_prefix(self):
        assert detect_provider("pk_live_123") is None

    def test_openai_default_expiration(self):
        """OpenAI keys expire three months after creation."""
        provider, expires_at = default_key_metadata("sk-abc", datetime(2026, 1, 31, 8, 0))

        assert provider == "openai"
        assert expires_at == datetime(2026, 4, 30, 8, 0)

    def test_other_keys_have_no_default(self):
        provider, expires_at = default_key_metadata("AIzaSyExample", NOW)

        assert provider is None
        assert expires_at is None

    def test_to_naive_utc(self):
        aware = datetime(2026, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1)))

        assert to_naive_utc(aware) == datetime(2026, 1, 1, 0, 0)
        assert to_naive_utc(None) is None

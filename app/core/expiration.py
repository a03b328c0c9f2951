"""
Expiration computations for stored API keys.

All datetimes are handled as naive UTC values, which is what the
database layer returns for SQLite and what the services store.
"""
import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from app.config import settings

SECONDS_PER_DAY = 24 * 60 * 60


class ExpirationState(str, Enum):
    """Expiration badge states."""
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    VALID = "valid"
    NO_EXPIRATION = "no_expiration"


BADGE_COLORS = {
    ExpirationState.EXPIRED: "red",
    ExpirationState.EXPIRING_SOON: "yellow",
    ExpirationState.VALID: "green",
    ExpirationState.NO_EXPIRATION: "gray",
}


@dataclass(frozen=True)
class ExpirationStatus:
    """Result of evaluating a key's expiration date."""
    state: ExpirationState
    days_until_expiration: Optional[int]
    label: str

    @property
    def color(self) -> str:
        return BADGE_COLORS[self.state]


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware datetime to naive UTC, leaving naive values untouched."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def days_until_expiration(expires_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days left before expiration, rounded up.

    Returns None for keys without an expiration date. Zero or a negative
    number means the key has expired.
    """
    if expires_at is None:
        return None
    now = to_naive_utc(now) or utcnow()
    delta = to_naive_utc(expires_at) - now
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    days = days_until_expiration(expires_at, now)
    return days is not None and days <= 0


def expiration_status(
    expires_at: Optional[datetime],
    threshold_days: int = 30,
    now: Optional[datetime] = None
) -> ExpirationStatus:
    """
    Classify a key's expiration date into a badge state.

    Args:
        expires_at: Expiration datetime or None
        threshold_days: Days before expiration at which a key counts as expiring soon
        now: Reference time (defaults to current UTC time)

    Returns:
        ExpirationStatus with state, remaining days and display label
    """
    days = days_until_expiration(expires_at, now)

    if days is None:
        return ExpirationStatus(ExpirationState.NO_EXPIRATION, None, "No expiration")
    if days <= 0:
        return ExpirationStatus(ExpirationState.EXPIRED, days, "Expired")

    label = f"Expires in {days} day{'s' if days > 1 else ''}"
    if days <= threshold_days:
        return ExpirationStatus(ExpirationState.EXPIRING_SOON, days, label)
    return ExpirationStatus(ExpirationState.VALID, days, label)


def detect_provider(key_value: str) -> Optional[str]:
    """Infer the key provider from the secret's prefix."""
    if key_value and key_value.startswith(settings.OPENAI_KEY_PREFIX):
        return "openai"
    return None


def default_key_metadata(
    key_value: str,
    created_at: Optional[datetime] = None
) -> Tuple[Optional[str], Optional[datetime]]:
    """
    Provider and default expiration for a newly stored secret.

    OpenAI keys expire a fixed number of months after creation; other keys
    get no default expiration.
    """
    provider = detect_provider(key_value)
    if provider != "openai":
        return provider, None

    created_at = to_naive_utc(created_at) or utcnow()
    return provider, add_months(created_at, settings.OPENAI_KEY_EXPIRATION_MONTHS)


"""
Search, filter and pagination of key listings.

Rows are any objects exposing name, project_name, provider, environment,
key_type and expires_at attributes.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from app.core.expiration import days_until_expiration

FILTER_EXPIRED = "expired"
FILTER_EXPIRING = "30days"
FILTER_FUTURE = "future"


@dataclass
class Page:
    """One page of a filtered listing."""
    items: List[Any]
    total: int
    page: int
    page_size: int
    pages: int = field(init=False)

    def __post_init__(self):
        self.pages = math.ceil(self.total / self.page_size) if self.page_size else 0


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value).lower()


def matches_search(row: Any, term: Optional[str]) -> bool:
    """Case-insensitive substring match on name, project name or provider."""
    if not term:
        return True
    term = term.lower()
    return (
        term in _text(row.name)
        or term in _text(row.project_name)
        or term in _text(row.provider)
    )


def matches_filters(
    row: Any,
    filters: Sequence[str],
    threshold_days: int,
    now: Optional[datetime] = None
) -> bool:
    """
    Check a row against filter tags; any matching tag is enough.

    Expiration tags compare remaining days with the user's threshold, other
    tags compare against project name, environment, key type or provider.
    """
    if not filters:
        return True

    tags = {_text(f) for f in filters if f}
    if not tags:
        return True

    attributes = {
        _text(row.project_name),
        _text(row.environment),
        _text(row.key_type),
        _text(row.provider),
    }
    attributes.discard("")
    if tags & attributes:
        return True

    days = days_until_expiration(row.expires_at, now)
    if FILTER_EXPIRED in tags and days is not None and days <= 0:
        return True
    if FILTER_EXPIRING in tags and days is not None and 0 < days <= threshold_days:
        return True
    if FILTER_FUTURE in tags and (days is None or days > threshold_days):
        return True
    return False


def apply_filters(
    rows: Iterable[Any],
    term: Optional[str] = None,
    filters: Optional[Sequence[str]] = None,
    threshold_days: int = 30,
    now: Optional[datetime] = None
) -> List[Any]:
    """Apply search and filters; both must match."""
    filters = filters or []
    return [
        row for row in rows
        if matches_search(row, term) and matches_filters(row, filters, threshold_days, now)
    ]


def paginate(rows: Sequence[Any], page: int = 1, page_size: int = 8) -> Page:
    """Slice a listing into a 1-based page. Out-of-range pages are empty."""
    page = max(page, 1)
    start = (page - 1) * page_size
    return Page(
        items=list(rows[start:start + page_size]),
        total=len(rows),
        page=page,
        page_size=page_size,
    )

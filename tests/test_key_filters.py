"""
Tests for key listing search, filters and pagination.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.core.key_filters import apply_filters, matches_filters, matches_search, paginate
from app.models.api_key import Environment, KeyType

NOW = datetime(2026, 6, 1, 9, 0, 0)


@dataclass
class Row:
    name: str
    project_name: str = "Default project"
    provider: Optional[str] = None
    environment: Environment = Environment.PRODUCTION
    key_type: Optional[KeyType] = None
    expires_at: Optional[datetime] = None


ROWS = [
    Row("Stripe live", "Shop", None, Environment.PRODUCTION, KeyType.ECOMMERCE_SITE, NOW - timedelta(days=2)),
    Row("OpenAI bot", "Support", "openai", Environment.DEVELOPMENT, KeyType.INTERNAL_API, NOW + timedelta(days=10)),
    Row("Maps", "Mobile", None, Environment.STAGING, KeyType.MOBILE_APP, NOW + timedelta(days=200)),
    Row("Legacy", "Default project", None, Environment.PRODUCTION, None, None),
]


class TestSearch:
    """Tests for the search term."""

    def test_empty_term_matches(self):
        assert matches_search(ROWS[0], "") is True
        assert matches_search(ROWS[0], None) is True

    def test_name_case_insensitive(self):
        assert matches_search(ROWS[0], "STRIPE") is True

    def test_project_name(self):
        assert matches_search(ROWS[1], "supp") is True

    def test_provider(self):
        assert matches_search(ROWS[1], "openai") is True

    def test_no_match(self):
        assert matches_search(ROWS[2], "stripe") is False


class TestFilters:
    """Tests for filter tags."""

    def test_no_filters_match_all(self):
        assert all(matches_filters(row, [], 30, NOW) for row in ROWS)

    def test_environment_tag(self):
        result = apply_filters(ROWS, filters=["development"], now=NOW)

        assert [r.name for r in result] == ["OpenAI bot"]

    def test_project_tag_case_insensitive(self):
        result = apply_filters(ROWS, filters=["shop"], now=NOW)

        assert [r.name for r in result] == ["Stripe live"]

    def test_key_type_tag(self):
        result = apply_filters(ROWS, filters=["mobile_app"], now=NOW)

        assert [r.name for r in result] == ["Maps"]

    def test_expired_tag(self):
        result = apply_filters(ROWS, filters=["expired"], now=NOW)

        assert [r.name for r in result] == ["Stripe live"]

    def test_expiring_tag_uses_threshold(self):
        assert [r.name for r in apply_filters(ROWS, filters=["30days"], now=NOW)] == ["OpenAI bot"]
        assert apply_filters(ROWS, filters=["30days"], threshold_days=5, now=NOW) == []

    def test_future_tag_includes_no_expiration(self):
        result = apply_filters(ROWS, filters=["future"], now=NOW)

        assert [r.name for r in result] == ["Maps", "Legacy"]

    def test_tags_are_or_combined(self):
        result = apply_filters(ROWS, filters=["expired", "staging"], now=NOW)

        assert [r.name for r in result] == ["Stripe live", "Maps"]

    def test_search_and_filters_are_and_combined(self):
        result = apply_filters(ROWS, term="legacy", filters=["expired"], now=NOW)

        assert result == []


class TestPagination:
    """Tests for 1-based pagination."""

    def test_first_page(self):
        page = paginate(list(range(20)), page=1, page_size=8)

        assert page.items == list(range(8))
        assert page.total == 20
        assert page.pages == 3

    def test_last_partial_page(self):
        page = paginate(list(range(20)), page=3, page_size=8)

        assert page.items == [16, 17, 18, 19]

    def test_out_of_range_page_is_empty(self):
        page = paginate(list(range(5)), page=4, page_size=8)

        assert page.items == []
        assert page.total == 5
        assert page.pages == 1

    def test_page_below_one_clamped(self):
        assert paginate([1, 2, 3], page=0, page_size=2).page == 1

    def test_empty_listing(self):
        page = paginate([], page=1, page_size=8)

        assert page.items == []
        assert page.pages == 0

"""
Tests for dashboard statistics, listing and expiring-key notices.
"""
from datetime import timedelta

from app.core.expiration import utcnow
from app.models.api_key import Environment
from app.services.dashboard_service import DashboardService
from app.services.key_service import KeyService
from app.services.settings_service import SettingsService


async def seed(db, context):
    now = utcnow()
    rows = [
        {"name": "Expired", "key_value": "a", "expires_at": now - timedelta(days=1)},
        {"name": "Soon", "key_value": "b", "expires_at": now + timedelta(days=5), "new_project_name": "Shop"},
        {"name": "Later", "key_value": "c", "expires_at": now + timedelta(days=120),
         "environment": Environment.DEVELOPMENT},
        {"name": "Forever", "key_value": "d"},
    ]
    keys = []
    for fields in rows:
        key, _ = await KeyService.create_key(db, context, fields)
        keys.append(key)
    return keys


class TestDashboard:
    """Tests for DashboardService.get_dashboard."""

    async def test_stats(self, db_session, user, context):
        await seed(db_session, context)

        dashboard = await DashboardService.get_dashboard(db_session, user.id)

        assert dashboard.stats.total_keys == 4
        assert dashboard.stats.expired_keys == 1
        assert dashboard.stats.valid_keys == 3
        assert dashboard.stats.expiring_soon == 1
        assert dashboard.stats.project_count == 1

    async def test_secrets_masked_by_default(self, db_session, user, context):
        await KeyService.create_key(db_session, context, {"name": "K", "key_value": "sk-0123456789abcdef"})

        dashboard = await DashboardService.get_dashboard(db_session, user.id)

        assert dashboard.keys[0].key_value != "sk-0123456789abcdef"
        assert dashboard.keys[0].provider == "openai"

    async def test_secrets_shown_when_preference_off(self, db_session, user, context):
        await SettingsService.update(db_session, user.id, {"hide_api_keys": False})
        await KeyService.create_key(db_session, context, {"name": "K", "key_value": "plain-value"})

        dashboard = await DashboardService.get_dashboard(db_session, user.id)

        assert dashboard.keys[0].key_value == "plain-value"

    async def test_search_filter_and_badges(self, db_session, user, context):
        await seed(db_session, context)

        dashboard = await DashboardService.get_dashboard(db_session, user.id, filters=["expired", "shop"])

        assert sorted(k.name for k in dashboard.keys) == ["Expired", "Soon"]
        badges = {k.name: k.expiration.state for k in dashboard.keys}
        assert badges == {"Expired": "expired", "Soon": "expiring_soon"}

        dashboard = await DashboardService.get_dashboard(db_session, user.id, search="for")
        assert [k.name for k in dashboard.keys] == ["Forever"]
        assert dashboard.keys[0].project_name == "Default project"

    async def test_pagination(self, db_session, user, context):
        for i in range(10):
            await KeyService.create_key(db_session, context, {"name": f"Key {i}", "key_value": str(i)})

        first = await DashboardService.get_dashboard(db_session, user.id)
        second = await DashboardService.get_dashboard(db_session, user.id, page=2)

        assert len(first.keys) == 8
        assert len(second.keys) == 2
        assert first.pages == 2
        assert first.total == 10
        # Newest first
        assert first.keys[0].name == "Key 9"

    async def test_deleted_keys_excluded(self, db_session, user, context):
        keys = await seed(db_session, context)
        await KeyService.delete_key(db_session, context, keys[0].id)

        dashboard = await DashboardService.get_dashboard(db_session, user.id)

        assert dashboard.stats.total_keys == 3
        assert dashboard.stats.expired_keys == 0


class TestExpiringKeys:
    """Tests for DashboardService.get_expiring_keys."""

    async def test_lists_expired_and_expiring(self, db_session, user, context):
        await seed(db_session, context)

        notice = await DashboardService.get_expiring_keys(db_session, user.id)

        assert notice.allowed is True
        assert notice.duration_ms == 2000
        assert [k.name for k in notice.keys] == ["Expired", "Soon"]

    async def test_respects_preferences(self, db_session, user, context):
        await seed(db_session, context)
        await SettingsService.update(db_session, user.id, {"notify_expiration": False})

        notice = await DashboardService.get_expiring_keys(db_session, user.id)

        assert notice.allowed is False
        assert notice.keys == []

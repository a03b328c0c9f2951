"""
Tests for history listing, descriptions, export and clearing.
"""
from app.models.api_key import Environment
from app.models.key_history import HistoryAction
from app.services.history_service import HistoryService, describe_entry
from app.services.key_service import KeyService


class TestDescribeEntry:
    """Tests for human-readable history descriptions."""

    def test_created(self):
        assert describe_entry(HistoryAction.CREATED, {}, "Shop") == "New API key created for Shop"

    def test_update_lists_changes(self):
        details = {
            "changes": {
                "name": {"old": "A", "new": "B"},
                "environment": {"old": "production", "new": "staging"},
                "is_active": {"old": True, "new": False},
            }
        }

        description = describe_entry(HistoryAction.UPDATED, details, "Shop")

        assert description == (
            'name changed from "A" to "B", '
            'environment changed from "production" to "staging", '
            "status changed to inactive"
        )

    def test_update_without_known_changes(self):
        assert describe_entry(HistoryAction.UPDATED, None, "Shop") == "API key updated"


class TestHistoryService:
    """Tests for HistoryService queries."""

    async def test_list_newest_first(self, db_session, user, context):
        key, _ = await KeyService.create_key(
            db_session, context, {"name": "K", "key_value": "v", "new_project_name": "Shop"}
        )
        await KeyService.update_key(db_session, context, key.id, {"environment": Environment.DEVELOPMENT})
        await KeyService.reveal_key(db_session, context, key.id)

        rows, total = await HistoryService.list_history(db_session, user.id)

        assert total == 3
        assert [r.entry.action for r in rows] == [HistoryAction.VIEWED, HistoryAction.UPDATED, HistoryAction.CREATED]
        assert rows[0].project_name == "Shop"
        assert rows[0].key_name == "K"
        assert rows[0].environment == "development"

    async def test_filter_and_window(self, db_session, user, context):
        key, _ = await KeyService.create_key(db_session, context, {"name": "K", "key_value": "v"})
        for _ in range(3):
            await KeyService.reveal_key(db_session, context, key.id)

        rows, total = await HistoryService.list_history(
            db_session, user.id, action=HistoryAction.VIEWED, limit=2, offset=1
        )

        assert total == 3
        assert len(rows) == 2

    async def test_other_users_history_hidden(self, db_session, context, other_user):
        await KeyService.create_key(db_session, context, {"name": "K", "key_value": "v"})

        rows, total = await HistoryService.list_history(db_session, other_user.id)

        assert rows == []
        assert total == 0

    async def test_export(self, db_session, user, context):
        await KeyService.create_key(db_session, context, {"name": "K", "key_value": "v"})

        exported = await HistoryService.export_history(db_session, user.id)

        assert len(exported) == 1
        assert set(exported[0]) == {"date", "action", "project", "environment", "details"}
        assert exported[0]["action"] == "created"
        assert exported[0]["environment"] == "production"

    async def test_clear_returns_statistics(self, db_session, user, context):
        first, _ = await KeyService.create_key(db_session, context, {"name": "A", "key_value": "a"})
        second, _ = await KeyService.create_key(db_session, context, {"name": "B", "key_value": "b"})
        await KeyService.reveal_key(db_session, context, first.id)

        stats = await HistoryService.clear_history(db_session, user.id)

        assert stats["total_keys"] == 2
        assert stats["total_history_entries"] == 3
        assert stats["success_count"] == 3
        assert stats["error_count"] == 0
        assert {s["id"]: s["actions"] for s in stats["key_summary"]} == {first.id: 2, second.id: 1}
        assert (await HistoryService.list_history(db_session, user.id))[1] == 0

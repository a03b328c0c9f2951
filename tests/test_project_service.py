"""
Tests for projects, membership roles and archiving.
"""
import pytest

from app.core.event_bus import event_bus, PROJECT_UPDATED
from app.core.exceptions import PermissionDeniedException, ProjectNotFoundException
from app.models.project import ProjectMember, ProjectRole
from app.services.key_service import KeyService
from app.services.history_service import ActionContext
from app.services.project_service import ProjectService


class TestProjects:
    """Tests for ProjectService."""

    async def test_create_records_owner(self, db_session, user):
        events = []
        event_bus.on(PROJECT_UPDATED, events.append)

        project = await ProjectService.create_project(db_session, user.id, "Shop", "Storefront keys")

        assert project.description == "Storefront keys"
        assert await ProjectService.is_project_admin(db_session, project.id, user.id) is True
        assert events == [{"user_id": user.id, "action": "created", "project_id": project.id}]

    async def test_list_counts_active_keys(self, db_session, user, context):
        project = await ProjectService.create_project(db_session, user.id, "Shop")
        await KeyService.create_key(db_session, context, {"name": "A", "key_value": "a", "project_id": project.id})
        key, _ = await KeyService.create_key(
            db_session, context, {"name": "B", "key_value": "b", "project_id": project.id}
        )
        await KeyService.delete_key(db_session, context, key.id)

        projects = await ProjectService.list_projects(db_session, user.id)

        assert [(p.name, count) for p, count in projects] == [("Shop", 1)]

    async def test_foreign_project_hidden(self, db_session, user, other_user):
        project = await ProjectService.create_project(db_session, other_user.id, "Private")

        assert await ProjectService.list_projects(db_session, user.id) == []
        with pytest.raises(ProjectNotFoundException):
            await ProjectService.get_project(db_session, user.id, project.id)

    async def test_member_sees_project_but_cannot_edit(self, db_session, user, other_user):
        project = await ProjectService.create_project(db_session, other_user.id, "Shared")
        db_session.add(ProjectMember(project_id=project.id, user_id=user.id, role=ProjectRole.MEMBER))
        await db_session.commit()

        assert (await ProjectService.get_project(db_session, user.id, project.id)).name == "Shared"
        with pytest.raises(PermissionDeniedException):
            await ProjectService.update_project(db_session, user.id, project.id, {"name": "Mine"})

    async def test_admin_member_can_edit(self, db_session, user, other_user):
        project = await ProjectService.create_project(db_session, other_user.id, "Shared")
        db_session.add(ProjectMember(project_id=project.id, user_id=user.id, role=ProjectRole.ADMIN))
        await db_session.commit()

        updated = await ProjectService.update_project(
            db_session, user.id, project.id, {"name": "Renamed", "description": ""}
        )

        assert updated.name == "Renamed"
        assert updated.description is None

    async def test_archive_hides_project(self, db_session, user):
        project = await ProjectService.create_project(db_session, user.id, "Old")

        archived = await ProjectService.archive_project(db_session, user.id, project.id)

        assert archived.is_archived is True
        assert await ProjectService.count_projects(db_session, user.id) == 0
        with pytest.raises(ProjectNotFoundException):
            await ProjectService.get_project(db_session, user.id, project.id)

    async def test_project_keys_newest_first(self, db_session, user, context):
        project = await ProjectService.create_project(db_session, user.id, "Shop")
        first, _ = await KeyService.create_key(
            db_session, context, {"name": "First", "key_value": "a", "project_id": project.id}
        )
        second, _ = await KeyService.create_key(
            db_session, context, {"name": "Second", "key_value": "b", "project_id": project.id}
        )

        _, keys = await ProjectService.get_project_keys(db_session, user.id, project.id)

        assert [k.id for k in keys] == [second.id, first.id]

    async def test_member_does_not_see_co_member_keys(self, db_session, user, other_user):
        project = await ProjectService.create_project(db_session, other_user.id, "Shared")
        db_session.add(ProjectMember(project_id=project.id, user_id=user.id, role=ProjectRole.MEMBER))
        await db_session.commit()
        owner_context = ActionContext(user_id=other_user.id, request_id="owner-request")
        await KeyService.create_key(
            db_session, owner_context, {"name": "Owner key", "key_value": "sk-OWNERSECRET-0123456789", "project_id": project.id}
        )

        _, keys = await ProjectService.get_project_keys(db_session, user.id, project.id)
        projects = await ProjectService.list_projects(db_session, user.id)

        assert keys == []
        assert [(p.name, count) for p, count in projects] == [("Shared", 0)]

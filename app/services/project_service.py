import logging
from typing import Optional, List, Tuple, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from app.models.api_key import ApiKey
from app.models.project import Project, ProjectMember, ProjectRole
from app.core.event_bus import event_bus, PROJECT_UPDATED
from app.core.exceptions import ProjectNotFoundException, PermissionDeniedException
from app.core.expiration import utcnow
from app.core.logging_utils import sanitize_log_message

logger = logging.getLogger(__name__)

ADMIN_ROLES = (ProjectRole.OWNER, ProjectRole.ADMIN)


def _visible_to(user_id: int):
    """Condition selecting projects the user created or is a member of."""
    membership = select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)
    return or_(Project.created_by == user_id, Project.id.in_(membership))


class ProjectService:
    """Service for project management, membership checks and archiving."""

    @staticmethod
    async def list_projects(db: AsyncSession, user_id: int) -> List[Tuple[Project, int]]:
        """
        Non-archived projects visible to the user with the user's active key count.

        Returns:
            List of (Project, active key count), ordered by name
        """
        key_count = (
            select(func.count(ApiKey.id))
            .where(
                ApiKey.project_id == Project.id,
                ApiKey.created_by == user_id,
                ApiKey.is_active.is_(True),
            )
            .correlate(Project)
            .scalar_subquery()
        )
        result = await db.execute(
            select(Project, key_count)
            .where(_visible_to(user_id), Project.archived_at.is_(None))
            .order_by(Project.name, Project.id)
        )
        return [(project, count or 0) for project, count in result.all()]

    @staticmethod
    async def count_projects(db: AsyncSession, user_id: int) -> int:
        """Number of non-archived projects visible to the user."""
        count = await db.scalar(
            select(func.count(Project.id)).where(_visible_to(user_id), Project.archived_at.is_(None))
        )
        return count or 0

    @staticmethod
    async def get_project(db: AsyncSession, user_id: int, project_id: int) -> Project:
        """
        Get a non-archived project visible to the user.

        Raises:
            ProjectNotFoundException: If missing, archived or not visible
        """
        result = await db.execute(
            select(Project).where(
                Project.id == project_id,
                Project.archived_at.is_(None),
                _visible_to(user_id),
            )
        )
        project = result.scalar_one_or_none()
        if not project:
            raise ProjectNotFoundException()
        return project

    @staticmethod
    async def is_project_admin(db: AsyncSession, project_id: int, user_id: int) -> bool:
        """True when the user created the project or holds an owner/admin membership."""
        project = await db.get(Project, project_id)
        if project is None:
            return False
        if project.created_by == user_id:
            return True

        role = await db.scalar(
            select(ProjectMember.role).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )
        return role in ADMIN_ROLES

    @staticmethod
    async def require_project_admin(db: AsyncSession, user_id: int, project_id: int) -> Project:
        """
        Get a project the user may administer.

        Raises:
            ProjectNotFoundException: If the project is not visible
            PermissionDeniedException: If the user is only a member
        """
        project = await ProjectService.get_project(db, user_id, project_id)
        if not await ProjectService.is_project_admin(db, project_id, user_id):
            raise PermissionDeniedException(detail="Only project owners and admins can change this project")
        return project

    @staticmethod
    async def create_project(
        db: AsyncSession,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        request_id: Optional[str] = None,
        commit: bool = True
    ) -> Project:
        """
        Create a project owned by the user.

        Args:
            db: Database session
            user_id: Creating user, recorded as owner
            name: Project name
            description: Optional description
            request_id: Request ID (UUID) for request tracing
            commit: Commit and notify listeners; False when part of a larger change

        Returns:
            Created Project record
        """
        project = Project(name=name.strip(), description=description or None, created_by=user_id)
        db.add(project)
        await db.flush()

        db.add(ProjectMember(project_id=project.id, user_id=user_id, role=ProjectRole.OWNER))

        if commit:
            await db.commit()
            await db.refresh(project)
            event_bus.emit(PROJECT_UPDATED, {"user_id": user_id, "action": "created", "project_id": project.id})

        logger.info(
            sanitize_log_message(
                "Project created",
                ProjectID=project.id,
                UserID=user_id,
                RequestID=request_id
            )
        )
        return project

    @staticmethod
    async def update_project(
        db: AsyncSession,
        user_id: int,
        project_id: int,
        changes: Dict[str, Any],
        request_id: Optional[str] = None
    ) -> Project:
        """
        Apply name/description changes to a project the user administers.

        Returns:
            Updated Project record
        """
        project = await ProjectService.require_project_admin(db, user_id, project_id)

        if "name" in changes and changes["name"] is not None:
            project.name = changes["name"].strip()
        if "description" in changes:
            project.description = changes["description"] or None
        project.updated_at = utcnow()

        await db.commit()
        await db.refresh(project)
        event_bus.emit(PROJECT_UPDATED, {"user_id": user_id, "action": "updated", "project_id": project.id})

        logger.info(
            sanitize_log_message(
                "Project updated",
                ProjectID=project.id,
                Fields=sorted(changes),
                RequestID=request_id
            )
        )
        return project

    @staticmethod
    async def archive_project(
        db: AsyncSession,
        user_id: int,
        project_id: int,
        request_id: Optional[str] = None
    ) -> Project:
        """
        Soft-delete a project by setting archived_at.

        Keys keep their project reference; the project just stops being listed.
        """
        project = await ProjectService.require_project_admin(db, user_id, project_id)
        project.archive()
        project.updated_at = utcnow()

        await db.commit()
        event_bus.emit(PROJECT_UPDATED, {"user_id": user_id, "action": "archived", "project_id": project.id})

        logger.info(
            sanitize_log_message(
                "Project archived",
                ProjectID=project.id,
                UserID=user_id,
                RequestID=request_id
            )
        )
        return project

    @staticmethod
    async def get_project_keys(db: AsyncSession, user_id: int, project_id: int) -> Tuple[Project, List[ApiKey]]:
        """The user's own active keys in a visible project, newest first."""
        project = await ProjectService.get_project(db, user_id, project_id)
        result = await db.execute(
            select(ApiKey)
            .where(
                ApiKey.project_id == project.id,
                ApiKey.created_by == user_id,
                ApiKey.is_active.is_(True),
            )
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
        )
        return project, list(result.scalars().all())

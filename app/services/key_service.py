import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.api_key import ApiKey, Environment
from app.models.key_history import HistoryAction
from app.models.project import Project
from app.core.event_bus import event_bus, KEY_UPDATED
from app.core.exceptions import KeyNotFoundException
from app.core.expiration import default_key_metadata, to_naive_utc, utcnow
from app.core.logging_utils import sanitize_log_message
from app.services.history_service import HistoryService, ActionContext, DEFAULT_PROJECT_NAME
from app.services.project_service import ProjectService

logger = logging.getLogger(__name__)

# Fields whose old/new values are written to the history on update
TRACKED_FIELDS = ("name", "environment", "key_type", "expires_at", "is_active", "project_id")


def _history_value(value: Any) -> Any:
    """JSON-friendly representation of a column value."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class KeyService:
    """Service for storing, editing, rotating and soft-deleting API keys."""

    @staticmethod
    async def get_key(db: AsyncSession, user_id: int, key_id: int) -> ApiKey:
        """
        Get an active key owned by the user.

        Raises:
            KeyNotFoundException: If the key is missing, deleted or owned by someone else
        """
        result = await db.execute(
            select(ApiKey).where(
                ApiKey.id == key_id,
                ApiKey.created_by == user_id,
                ApiKey.is_active.is_(True),
            )
        )
        key = result.scalar_one_or_none()
        if not key:
            raise KeyNotFoundException()
        return key

    @staticmethod
    async def get_project_name(db: AsyncSession, key: ApiKey) -> str:
        if key.project_id is None:
            return DEFAULT_PROJECT_NAME
        project = await db.get(Project, key.project_id)
        return project.name if project else DEFAULT_PROJECT_NAME

    @staticmethod
    async def get_key_with_project(db: AsyncSession, user_id: int, key_id: int) -> Tuple[ApiKey, str]:
        key = await KeyService.get_key(db, user_id, key_id)
        return key, await KeyService.get_project_name(db, key)

    @staticmethod
    async def _resolve_project(
        db: AsyncSession,
        context: ActionContext,
        project_id: Optional[int],
        new_project_name: Optional[str]
    ) -> Optional[Project]:
        """Existing project the user can see, a project created inline, or None for the default project."""
        if new_project_name:
            return await ProjectService.create_project(
                db,
                context.user_id,
                new_project_name,
                request_id=context.request_id,
                commit=False
            )
        if project_id is not None:
            return await ProjectService.get_project(db, context.user_id, project_id)
        return None

    @staticmethod
    def _notify(context: ActionContext, action: HistoryAction, key_id: int) -> None:
        event_bus.emit(KEY_UPDATED, {"user_id": context.user_id, "action": action.value, "key_id": key_id})

    @staticmethod
    async def create_key(
        db: AsyncSession,
        context: ActionContext,
        data: Dict[str, Any]
    ) -> Tuple[ApiKey, str]:
        """
        Store a new key.

        OpenAI secrets get their provider set and, without an explicit
        expiration, expire a fixed number of months after creation.

        Args:
            db: Database session
            context: Acting user and request metadata
            data: Validated ApiKeyCreateRequest fields

        Returns:
            Tuple of (created ApiKey, project name)
        """
        project = await KeyService._resolve_project(
            db, context, data.get("project_id"), data.get("new_project_name")
        )

        now = utcnow()
        provider, default_expiration = default_key_metadata(data["key_value"], now)
        expires_at = to_naive_utc(data.get("expires_at")) or default_expiration

        key = ApiKey(
            name=data["name"].strip(),
            key_value=data["key_value"],
            project_id=project.id if project else None,
            created_by=context.user_id,
            environment=data.get("environment") or Environment.PRODUCTION,
            key_type=data.get("key_type"),
            provider=provider,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )
        db.add(key)
        await db.flush()

        project_name = project.name if project else DEFAULT_PROJECT_NAME
        HistoryService.record_action(
            db,
            context,
            HistoryAction.CREATED,
            key.id,
            details={
                "name": key.name,
                "project": project_name,
                "type": key.key_type.value if key.key_type else None,
            },
        )

        await db.commit()
        await db.refresh(key)
        KeyService._notify(context, HistoryAction.CREATED, key.id)

        logger.info(
            sanitize_log_message(
                "API key created",
                KeyID=key.id,
                ProjectID=key.project_id,
                Provider=provider,
                RequestID=context.request_id
            )
        )
        return key, project_name

    @staticmethod
    async def update_key(
        db: AsyncSession,
        context: ActionContext,
        key_id: int,
        changes: Dict[str, Any]
    ) -> Tuple[ApiKey, str]:
        """
        Edit a key and record the changed fields.

        Args:
            db: Database session
            context: Acting user and request metadata
            key_id: Key to edit
            changes: Fields explicitly sent by the client

        Returns:
            Tuple of (updated ApiKey, project name)
        """
        key = await KeyService.get_key(db, context.user_id, key_id)

        if "new_project_name" in changes or "project_id" in changes:
            project = await KeyService._resolve_project(
                db, context, changes.get("project_id"), changes.get("new_project_name")
            )
            changes["project_id"] = project.id if project else None
        changes.pop("new_project_name", None)

        if "expires_at" in changes:
            changes["expires_at"] = to_naive_utc(changes["expires_at"])
        if "name" in changes and changes["name"] is not None:
            changes["name"] = changes["name"].strip()
        for field in ("name", "environment", "is_active"):
            # Required columns cannot be cleared
            if field in changes and changes[field] is None:
                changes.pop(field)

        diff: Dict[str, Dict[str, Any]] = {}
        for field in TRACKED_FIELDS:
            if field not in changes:
                continue
            old, new = getattr(key, field), changes[field]
            if isinstance(old, datetime):
                old = to_naive_utc(old)
            if _history_value(old) != _history_value(new):
                diff[field] = {"old": _history_value(old), "new": _history_value(new)}
                setattr(key, field, new)

        new_secret = changes.get("key_value")
        if new_secret and new_secret != key.key_value:
            provider, default_expiration = default_key_metadata(new_secret, utcnow())
            key.key_value = new_secret
            key.provider = provider
            # The secret itself never goes to the history
            diff["key_value"] = {"changed": True}
            # An expiration sent in the same request wins over the provider default
            if default_expiration is not None and "expires_at" not in changes:
                diff["expires_at"] = {
                    "old": _history_value(key.expires_at),
                    "new": _history_value(default_expiration),
                }
                key.expires_at = default_expiration

        if diff:
            key.updated_at = utcnow()
            HistoryService.record_action(db, context, HistoryAction.UPDATED, key.id, details={"changes": diff})

        await db.commit()
        await db.refresh(key)
        if diff:
            KeyService._notify(context, HistoryAction.UPDATED, key.id)

        logger.info(
            sanitize_log_message(
                "API key updated",
                KeyID=key.id,
                Fields=sorted(diff),
                RequestID=context.request_id
            )
        )
        return key, await KeyService.get_project_name(db, key)

    @staticmethod
    async def rotate_key(
        db: AsyncSession,
        context: ActionContext,
        key_id: int,
        key_value: str
    ) -> Tuple[ApiKey, str]:
        """
        Replace a key's secret.

        Provider and default expiration are recomputed from the new secret;
        a key whose new secret has no default expiration keeps its current one.
        """
        key = await KeyService.get_key(db, context.user_id, key_id)

        now = utcnow()
        provider, default_expiration = default_key_metadata(key_value, now)
        key.key_value = key_value
        key.provider = provider
        if default_expiration is not None:
            key.expires_at = default_expiration
        key.updated_at = now

        HistoryService.record_action(
            db,
            context,
            HistoryAction.ROTATED,
            key.id,
            details={
                "provider": provider,
                "expires_at": _history_value(key.expires_at),
            },
        )

        await db.commit()
        await db.refresh(key)
        KeyService._notify(context, HistoryAction.ROTATED, key.id)

        logger.info(
            sanitize_log_message(
                "API key rotated",
                KeyID=key.id,
                RequestID=context.request_id
            )
        )
        return key, await KeyService.get_project_name(db, key)

    @staticmethod
    async def delete_key(
        db: AsyncSession,
        context: ActionContext,
        key_id: int
    ) -> ApiKey:
        """Soft-delete a key by clearing its active flag."""
        key = await KeyService.get_key(db, context.user_id, key_id)
        key.is_active = False
        key.updated_at = utcnow()

        HistoryService.record_action(db, context, HistoryAction.DELETED, key.id, details={"name": key.name})

        await db.commit()
        KeyService._notify(context, HistoryAction.DELETED, key.id)

        logger.info(
            sanitize_log_message(
                "API key deleted",
                KeyID=key.id,
                RequestID=context.request_id
            )
        )
        return key

    @staticmethod
    async def reveal_key(
        db: AsyncSession,
        context: ActionContext,
        key_id: int
    ) -> Tuple[ApiKey, str]:
        """Return a key for plain display and record that it was viewed."""
        key, project_name = await KeyService.get_key_with_project(db, context.user_id, key_id)

        HistoryService.record_action(db, context, HistoryAction.VIEWED, key.id)
        await db.commit()

        logger.info(
            sanitize_log_message(
                "API key revealed",
                KeyID=key.id,
                RequestID=context.request_id
            )
        )
        return key, project_name

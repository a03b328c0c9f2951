import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from app.models.api_key import ApiKey
from app.models.key_history import KeyHistory, HistoryAction
from app.models.project import Project
from app.core.logging_utils import sanitize_log_message

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Default project"

ACTION_LABELS = {
    HistoryAction.CREATED: "Created",
    HistoryAction.UPDATED: "Updated",
    HistoryAction.DELETED: "Deleted",
    HistoryAction.VIEWED: "Viewed",
    HistoryAction.ROTATED: "Rotated",
}


@dataclass
class ActionContext:
    """Who performed an action, and from where."""
    user_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None


@dataclass
class HistoryRow:
    """History entry joined with the key and project it refers to."""
    entry: KeyHistory
    key_name: Optional[str]
    environment: Optional[str]
    project_name: str


def describe_entry(action: HistoryAction, details: Optional[Dict[str, Any]], project_name: str) -> str:
    """
    Human-readable description of a history entry.

    Updated entries list the name, environment and status changes they
    carry; other actions get a fixed sentence.
    """
    if action == HistoryAction.CREATED:
        return f"New API key created for {project_name}"
    if action == HistoryAction.DELETED:
        return "API key deleted"
    if action == HistoryAction.VIEWED:
        return "API key viewed"
    if action == HistoryAction.ROTATED:
        return "API key rotated"

    changes = (details or {}).get("changes") or {}
    parts = []
    name = changes.get("name") or {}
    if name.get("old") and name.get("new"):
        parts.append(f'name changed from "{name["old"]}" to "{name["new"]}"')
    environment = changes.get("environment") or {}
    if environment.get("old") and environment.get("new"):
        parts.append(f'environment changed from "{environment["old"]}" to "{environment["new"]}"')
    is_active = changes.get("is_active") or {}
    if "old" in is_active and "new" in is_active:
        parts.append(f"status changed to {'active' if is_active['new'] else 'inactive'}")
    return ", ".join(parts) if parts else "API key updated"


class HistoryService:
    """Service for recording, listing, exporting and clearing key history."""

    @staticmethod
    def record_action(
        db: AsyncSession,
        context: ActionContext,
        action: HistoryAction,
        api_key_id: int,
        details: Optional[Dict[str, Any]] = None
    ) -> KeyHistory:
        """
        Add a history entry to the session.

        The entry is committed together with the change it describes.

        Args:
            db: Database session
            context: Acting user and request metadata
            action: Action performed
            api_key_id: ID of the key acted upon
            details: JSON-serializable details

        Returns:
            Pending KeyHistory record
        """
        entry = KeyHistory(
            api_key_id=api_key_id,
            action=action,
            performed_by=context.user_id,
            details=details,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            request_id=context.request_id,
        )
        db.add(entry)

        logger.debug(
            sanitize_log_message(
                f"History: {action.value}",
                KeyID=api_key_id,
                UserID=context.user_id,
                RequestID=context.request_id
            )
        )
        return entry

    @staticmethod
    async def list_history(
        db: AsyncSession,
        user_id: int,
        action: Optional[HistoryAction] = None,
        api_key_id: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = 100,
        offset: int = 0
    ) -> Tuple[List[HistoryRow], int]:
        """
        Query the user's history, newest first.

        Returns:
            Tuple of (rows for the requested window, total matching entries)
        """
        conditions = [KeyHistory.performed_by == user_id]
        if action:
            conditions.append(KeyHistory.action == action)
        if api_key_id:
            conditions.append(KeyHistory.api_key_id == api_key_id)
        if start_date:
            conditions.append(KeyHistory.performed_at >= start_date)
        if end_date:
            conditions.append(KeyHistory.performed_at <= end_date)

        total = await db.scalar(
            select(func.count(KeyHistory.id)).where(*conditions)
        )

        query = (
            select(KeyHistory, ApiKey.name, ApiKey.environment, Project.name)
            .join(ApiKey, ApiKey.id == KeyHistory.api_key_id)
            .outerjoin(Project, Project.id == ApiKey.project_id)
            .where(*conditions)
            .order_by(KeyHistory.performed_at.desc(), KeyHistory.id.desc())
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)

        rows = [
            HistoryRow(
                entry=entry,
                key_name=key_name,
                environment=environment.value if environment else None,
                project_name=project_name or DEFAULT_PROJECT_NAME,
            )
            for entry, key_name, environment, project_name in result.all()
        ]
        return rows, total or 0

    @staticmethod
    async def export_history(db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
        """
        All of the user's history as plain dictionaries for download.

        Returns:
            List of {date, action, project, environment, details}
        """
        rows, _ = await HistoryService.list_history(db, user_id, limit=None)
        return [
            {
                "date": row.entry.performed_at.isoformat(),
                "action": row.entry.action.value,
                "project": row.project_name,
                "environment": row.environment,
                "details": row.entry.details,
            }
            for row in rows
        ]

    @staticmethod
    async def clear_history(db: AsyncSession, user_id: int, request_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Delete every history entry performed by the user.

        Returns:
            Statistics with total_keys, total_history_entries, success_count,
            error_count and a per-key summary of deleted entries
        """
        keys_result = await db.execute(
            select(ApiKey.id, ApiKey.name, ApiKey.project_id)
            .where(ApiKey.created_by == user_id)
            .order_by(ApiKey.id)
        )
        user_keys = keys_result.all()

        counts_result = await db.execute(
            select(KeyHistory.api_key_id, func.count(KeyHistory.id))
            .where(KeyHistory.performed_by == user_id)
            .group_by(KeyHistory.api_key_id)
        )
        counts = dict(counts_result.all())
        total_entries = sum(counts.values())

        await db.execute(
            delete(KeyHistory).where(KeyHistory.performed_by == user_id)
        )
        await db.commit()

        logger.info(
            sanitize_log_message(
                "History cleared",
                UserID=user_id,
                Entries=total_entries,
                RequestID=request_id
            )
        )

        return {
            "success": True,
            "total_keys": len(user_keys),
            "total_history_entries": total_entries,
            "success_count": total_entries,
            "error_count": 0,
            "key_summary": [
                {
                    "id": key_id,
                    "name": name,
                    "project_id": project_id,
                    "actions": counts.get(key_id, 0),
                }
                for key_id, name, project_id in user_keys
            ],
        }

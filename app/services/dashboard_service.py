import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.config import settings
from app.models.api_key import ApiKey
from app.models.project import Project
from app.models.user_settings import UserSettings
from app.core.expiration import days_until_expiration, utcnow
from app.core.key_filters import apply_filters, paginate
from app.core.notifications import NotificationType, is_notification_allowed, get_notification_duration
from app.schemas.api_key import ApiKeyResponse
from app.schemas.dashboard import DashboardStats, DashboardResponse, ExpiringKeysNotification
from app.services.history_service import DEFAULT_PROJECT_NAME
from app.services.project_service import ProjectService
from app.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


@dataclass
class KeyRow:
    """Active key joined with its project name, as listed on the dashboard."""
    key: ApiKey
    project_name: str

    @property
    def name(self):
        return self.key.name

    @property
    def provider(self):
        return self.key.provider

    @property
    def environment(self):
        return self.key.environment

    @property
    def key_type(self):
        return self.key.key_type

    @property
    def expires_at(self):
        return self.key.expires_at


def _response(row: KeyRow, user_settings: UserSettings, now: datetime) -> ApiKeyResponse:
    return ApiKeyResponse.from_key(
        row.key,
        row.project_name,
        threshold_days=user_settings.expiration_threshold,
        hide_secret=user_settings.hide_api_keys,
        now=now,
    )


class DashboardService:
    """Service assembling the key listing, its statistics and expiration notices."""

    @staticmethod
    async def list_key_rows(db: AsyncSession, user_id: int) -> List[KeyRow]:
        """Active keys owned by the user, newest first."""
        result = await db.execute(
            select(ApiKey, Project.name)
            .outerjoin(Project, Project.id == ApiKey.project_id)
            .where(ApiKey.created_by == user_id, ApiKey.is_active.is_(True))
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
        )
        return [KeyRow(key, project_name or DEFAULT_PROJECT_NAME) for key, project_name in result.all()]

    @staticmethod
    def compute_stats(
        rows: Sequence[KeyRow],
        threshold_days: int,
        project_count: int,
        now: Optional[datetime] = None
    ) -> DashboardStats:
        """Count expired and soon-expiring keys among the rows."""
        expired = 0
        expiring = 0
        for row in rows:
            days = days_until_expiration(row.expires_at, now)
            if days is None:
                continue
            if days <= 0:
                expired += 1
            elif days <= threshold_days:
                expiring += 1

        return DashboardStats(
            total_keys=len(rows),
            valid_keys=len(rows) - expired,
            expired_keys=expired,
            expiring_soon=expiring,
            project_count=project_count,
        )

    @staticmethod
    async def get_dashboard(
        db: AsyncSession,
        user_id: int,
        search: Optional[str] = None,
        filters: Optional[List[str]] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> DashboardResponse:
        """
        Statistics plus one page of the filtered key listing.

        Args:
            db: Database session
            user_id: Owner of the keys
            search: Substring matched against key name, project name or provider
            filters: Filter tags, any of which may match
            page: 1-based page number
            page_size: Keys per page (defaults to the configured page size)

        Returns:
            DashboardResponse
        """
        user_settings = await SettingsService.get_or_create(db, user_id)
        threshold = user_settings.expiration_threshold
        now = utcnow()

        rows = await DashboardService.list_key_rows(db, user_id)
        project_count = await ProjectService.count_projects(db, user_id)
        stats = DashboardService.compute_stats(rows, threshold, project_count, now)

        filtered = apply_filters(rows, search, filters, threshold, now)
        current = paginate(filtered, page, page_size or settings.KEYS_PER_PAGE)

        logger.debug(
            f"Dashboard for user {user_id}: {len(filtered)}/{len(rows)} keys match, page {current.page}/{current.pages}"
        )

        return DashboardResponse(
            stats=stats,
            keys=[_response(row, user_settings, now) for row in current.items],
            total=current.total,
            page=current.page,
            page_size=current.page_size,
            pages=current.pages,
        )

    @staticmethod
    async def get_expiring_keys(db: AsyncSession, user_id: int) -> ExpiringKeysNotification:
        """
        Expired and soon-expiring keys to notify the user about.

        Keys are only listed when the user allows expiration notifications.
        """
        user_settings = await SettingsService.get_or_create(db, user_id)
        allowed = is_notification_allowed(user_settings, NotificationType.EXPIRATION)
        duration_ms = get_notification_duration(user_settings)

        keys: List[ApiKeyResponse] = []
        if allowed:
            now = utcnow()
            threshold = user_settings.expiration_threshold
            for row in await DashboardService.list_key_rows(db, user_id):
                days = days_until_expiration(row.expires_at, now)
                if days is not None and days <= threshold:
                    keys.append(_response(row, user_settings, now))
            keys.sort(key=lambda item: item.expiration.days_until_expiration)

        return ExpiringKeysNotification(allowed=allowed, duration_ms=duration_ms, keys=keys)

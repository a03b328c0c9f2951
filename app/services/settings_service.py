import logging
from typing import Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.user_settings import UserSettings
from app.core.expiration import utcnow

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for per-user preferences."""

    @staticmethod
    async def get_or_create(db: AsyncSession, user_id: int) -> UserSettings:
        """Get the user's preferences, creating the default row when missing."""
        result = await db.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        user_settings = result.scalar_one_or_none()
        if user_settings:
            return user_settings

        user_settings = UserSettings(user_id=user_id)
        db.add(user_settings)
        await db.flush()
        await db.refresh(user_settings)
        logger.debug(f"Created default settings for user {user_id}")
        return user_settings

    @staticmethod
    async def update(db: AsyncSession, user_id: int, changes: Dict[str, Any]) -> UserSettings:
        """
        Apply a partial update to the user's preferences.

        Args:
            db: Database session
            user_id: Owner of the preferences
            changes: Field values to set; None values are skipped

        Returns:
            Merged UserSettings record
        """
        user_settings = await SettingsService.get_or_create(db, user_id)
        for field, value in changes.items():
            if value is not None and hasattr(user_settings, field):
                setattr(user_settings, field, value)
        user_settings.updated_at = utcnow()

        await db.commit()
        await db.refresh(user_settings)

        logger.info(f"Settings updated for user {user_id}: {sorted(changes)}")
        return user_settings

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.settings import UserSettingsResponse, UserSettingsUpdateRequest
from app.services.settings_service import SettingsService

router = APIRouter()


@router.get("", response_model=UserSettingsResponse)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the user's preferences, created with defaults on first access.
    """
    return await SettingsService.get_or_create(db, current_user.id)


@router.patch("", response_model=UserSettingsResponse)
async def update_settings(
    payload: UserSettingsUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update some preferences and return the merged result.
    """
    return await SettingsService.update(db, current_user.id, payload.model_dump(exclude_unset=True))

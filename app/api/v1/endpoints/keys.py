from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.api.deps import get_action_context, get_provider_client
from app.external.provider_client import ProviderAPIClient
from app.middleware.rate_limit import rate_limit_validation
from app.schemas.api_key import (
    ApiKeyCreateRequest,
    ApiKeyUpdateRequest,
    ApiKeyRotateRequest,
    ApiKeyValidateRequest,
    ApiKeyValidateResponse,
    ApiKeyResponse,
)
from app.services.history_service import ActionContext
from app.services.key_service import KeyService
from app.services.settings_service import SettingsService

router = APIRouter()


async def _key_response(db: AsyncSession, user_id: int, key, project_name: str, reveal: bool = False) -> ApiKeyResponse:
    user_settings = await SettingsService.get_or_create(db, user_id)
    return ApiKeyResponse.from_key(
        key,
        project_name,
        threshold_days=user_settings.expiration_threshold,
        hide_secret=user_settings.hide_api_keys and not reveal
    )


@router.post("/validate", response_model=ApiKeyValidateResponse)
@rate_limit_validation()
async def validate_key(
    request: Request,
    payload: ApiKeyValidateRequest,
    context: ActionContext = Depends(get_action_context),
    client: ProviderAPIClient = Depends(get_provider_client)
):
    """
    Check a secret with its provider.
    Only OpenAI keys can be checked; other keys report that no validation is available.
    """
    result = await client.validate_key(payload.key_value, request_id=context.request_id)
    return ApiKeyValidateResponse(
        is_valid=result.is_valid,
        message=result.message,
        provider=result.provider
    )


@router.post("", response_model=ApiKeyResponse, status_code=status.HTTP_201_CREATED)
async def create_key(
    payload: ApiKeyCreateRequest,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Store a new API key.
    A project is created on the fly when new_project_name is given.
    """
    key, project_name = await KeyService.create_key(db, context, payload.model_dump())
    return await _key_response(db, context.user_id, key, project_name)


@router.get("/{key_id}", response_model=ApiKeyResponse)
async def get_key(
    key_id: int,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Get a key. The secret is masked when the user hides API keys.
    """
    key, project_name = await KeyService.get_key_with_project(db, context.user_id, key_id)
    return await _key_response(db, context.user_id, key, project_name)


@router.get("/{key_id}/reveal", response_model=ApiKeyResponse)
async def reveal_key(
    key_id: int,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Get a key with its plain secret. Recorded in the history as viewed.
    """
    key, project_name = await KeyService.reveal_key(db, context, key_id)
    return await _key_response(db, context.user_id, key, project_name, reveal=True)


@router.patch("/{key_id}", response_model=ApiKeyResponse)
async def update_key(
    key_id: int,
    payload: ApiKeyUpdateRequest,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Edit a key. Only the fields sent are changed.
    """
    key, project_name = await KeyService.update_key(
        db, context, key_id, payload.model_dump(exclude_unset=True)
    )
    return await _key_response(db, context.user_id, key, project_name)


@router.post("/{key_id}/rotate", response_model=ApiKeyResponse)
async def rotate_key(
    key_id: int,
    payload: ApiKeyRotateRequest,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Replace a key's secret.
    """
    key, project_name = await KeyService.rotate_key(db, context, key_id, payload.key_value)
    return await _key_response(db, context.user_id, key, project_name)


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_key(
    key_id: int,
    db: AsyncSession = Depends(get_db),
    context: ActionContext = Depends(get_action_context)
):
    """
    Delete a key (soft delete: the key is deactivated).
    """
    await KeyService.delete_key(db, context, key_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Pydantic schemas for request/response contracts."""
from app.schemas.auth import (
    SignUpRequest,
    SignInRequest,
    UserResponse,
    TokenResponse,
)
from app.schemas.project import (
    ProjectCreateRequest,
    ProjectUpdateRequest,
    ProjectResponse,
)
from app.schemas.api_key import (
    ApiKeyCreateRequest,
    ApiKeyUpdateRequest,
    ApiKeyRotateRequest,
    ApiKeyValidateRequest,
    ApiKeyValidateResponse,
    ApiKeyResponse,
    ExpirationBadge,
)
from app.schemas.history import (
    HistoryEntryResponse,
    HistoryListResponse,
    ClearHistoryResponse,
    KeySummary,
)
from app.schemas.settings import (
    UserSettingsResponse,
    UserSettingsUpdateRequest,
)
from app.schemas.dashboard import (
    DashboardStats,
    DashboardResponse,
    ExpiringKeysNotification,
)

__all__ = [
    "SignUpRequest",
    "SignInRequest",
    "UserResponse",
    "TokenResponse",
    "ProjectCreateRequest",
    "ProjectUpdateRequest",
    "ProjectResponse",
    "ApiKeyCreateRequest",
    "ApiKeyUpdateRequest",
    "ApiKeyRotateRequest",
    "ApiKeyValidateRequest",
    "ApiKeyValidateResponse",
    "ApiKeyResponse",
    "ExpirationBadge",
    "HistoryEntryResponse",
    "HistoryListResponse",
    "ClearHistoryResponse",
    "KeySummary",
    "UserSettingsResponse",
    "UserSettingsUpdateRequest",
    "DashboardStats",
    "DashboardResponse",
    "ExpiringKeysNotification",
]

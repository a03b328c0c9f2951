from typing import List
from pydantic import BaseModel
from app.schemas.api_key import ApiKeyResponse


class DashboardStats(BaseModel):
    """Headline counters of the dashboard."""
    total_keys: int
    valid_keys: int
    expired_keys: int
    expiring_soon: int
    project_count: int


class DashboardResponse(BaseModel):
    """Response schema for the dashboard listing."""
    stats: DashboardStats
    keys: List[ApiKeyResponse]
    total: int
    page: int
    page_size: int
    pages: int


class ExpiringKeysNotification(BaseModel):
    """Response schema for expiring-key notifications."""
    allowed: bool
    duration_ms: int
    keys: List[ApiKeyResponse]

from typing import Optional, Dict, Any, List
from datetime import datetime
from pydantic import BaseModel
from app.models.key_history import HistoryAction


class HistoryEntryResponse(BaseModel):
    """Response schema for a key history entry."""
    id: int
    action: HistoryAction
    action_label: str
    description: str
    api_key_id: int
    key_name: Optional[str] = None
    project_name: str
    environment: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    performed_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class HistoryListResponse(BaseModel):
    """Response schema for history list."""
    entries: List[HistoryEntryResponse]
    total: int
    limit: int
    offset: int


class KeySummary(BaseModel):
    """Per-key line of the clear-history report."""
    id: int
    name: str
    project_id: Optional[int] = None
    actions: int


class ClearHistoryResponse(BaseModel):
    """Response schema for clearing the history."""
    success: bool = True
    total_keys: int
    total_history_entries: int
    success_count: int
    error_count: int
    key_summary: List[KeySummary]

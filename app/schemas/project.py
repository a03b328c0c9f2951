from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class ProjectCreateRequest(BaseModel):
    """Request schema for creating a project."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class ProjectUpdateRequest(BaseModel):
    """Request schema for editing a project."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class ProjectResponse(BaseModel):
    """Response schema for project."""
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    archived_at: Optional[datetime] = None
    key_count: int = 0

    model_config = ConfigDict(from_attributes=True)

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from app.models.api_key import Environment, KeyType
from app.core.expiration import expiration_status
from app.core.security import mask_secret


class ApiKeyCreateRequest(BaseModel):
    """Request schema for storing a new API key."""
    name: str = Field(..., min_length=1, max_length=200)
    key_value: str = Field(..., min_length=1, max_length=4096)
    project_id: Optional[int] = None
    new_project_name: Optional[str] = Field(None, min_length=1, max_length=200)
    environment: Environment = Environment.PRODUCTION
    key_type: Optional[KeyType] = None
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_project_choice(self):
        if self.project_id is not None and self.new_project_name:
            raise ValueError("Provide either project_id or new_project_name, not both")
        return self


class ApiKeyUpdateRequest(BaseModel):
    """Request schema for editing an API key. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    key_value: Optional[str] = Field(None, min_length=1, max_length=4096)
    project_id: Optional[int] = None
    new_project_name: Optional[str] = Field(None, min_length=1, max_length=200)
    environment: Optional[Environment] = None
    key_type: Optional[KeyType] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_project_choice(self):
        if self.project_id is not None and self.new_project_name:
            raise ValueError("Provide either project_id or new_project_name, not both")
        return self


class ApiKeyRotateRequest(BaseModel):
    """Request schema for replacing a key's secret."""
    key_value: str = Field(..., min_length=1, max_length=4096)


class ApiKeyValidateRequest(BaseModel):
    """Request schema for checking a secret with its provider."""
    key_value: str = Field(..., min_length=1, max_length=4096)


class ApiKeyValidateResponse(BaseModel):
    """Response schema for provider validation."""
    is_valid: Optional[bool] = None
    message: str
    provider: Optional[str] = None


class ExpirationBadge(BaseModel):
    """Expiration state of a key as displayed in listings."""
    state: str
    label: str
    color: str
    days_until_expiration: Optional[int] = None


class ApiKeyResponse(BaseModel):
    """Response schema for API key."""
    id: int
    name: str
    key_value: str  # Masked unless revealed
    project_id: Optional[int] = None
    project_name: str
    environment: Environment
    key_type: Optional[KeyType] = None
    provider: Optional[str] = None
    is_active: bool
    expires_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    expiration: ExpirationBadge

    @classmethod
    def from_key(
        cls,
        key,
        project_name: str,
        threshold_days: int = 30,
        hide_secret: bool = True,
        now: Optional[datetime] = None
    ) -> "ApiKeyResponse":
        """Build the response for a stored key, masking the secret when asked to."""
        status = expiration_status(key.expires_at, threshold_days, now)
        return cls(
            id=key.id,
            name=key.name,
            key_value=mask_secret(key.key_value) if hide_secret else key.key_value,
            project_id=key.project_id,
            project_name=project_name,
            environment=key.environment,
            key_type=key.key_type,
            provider=key.provider,
            is_active=key.is_active,
            expires_at=key.expires_at,
            last_used_at=key.last_used_at,
            created_at=key.created_at,
            updated_at=key.updated_at,
            expiration=ExpirationBadge(
                state=status.state.value,
                label=status.label,
                color=status.color,
                days_until_expiration=status.days_until_expiration,
            ),
        )

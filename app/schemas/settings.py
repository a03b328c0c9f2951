from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field

Language = Literal["fr", "en", "es"]


class UserSettingsResponse(BaseModel):
    """Response schema for user preferences."""
    language: Language
    dark_mode: bool
    notifications: bool
    expiration_threshold: int
    hide_api_keys: bool
    two_factor_auth: bool
    notify_expiration: bool
    notify_new_key: bool
    notify_login: bool
    notification_duration: float
    email_notifications: bool
    marketing_emails: bool

    model_config = ConfigDict(from_attributes=True)


class UserSettingsUpdateRequest(BaseModel):
    """Partial update of user preferences."""
    language: Optional[Language] = None
    dark_mode: Optional[bool] = None
    notifications: Optional[bool] = None
    expiration_threshold: Optional[int] = Field(None, ge=1, le=90)
    hide_api_keys: Optional[bool] = None
    two_factor_auth: Optional[bool] = None
    notify_expiration: Optional[bool] = None
    notify_new_key: Optional[bool] = None
    notify_login: Optional[bool] = None
    notification_duration: Optional[float] = Field(None, ge=1, le=2.5)
    email_notifications: Optional[bool] = None
    marketing_emails: Optional[bool] = None

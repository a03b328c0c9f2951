from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SignUpRequest(BaseModel):
    """Request schema for account creation."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)  # bcrypt only uses 72 bytes
    full_name: Optional[str] = Field(None, max_length=200)


class SignInRequest(BaseModel):
    """Request schema for email/password sign-in."""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Response schema for user info."""
    id: int
    email: str
    full_name: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Response schema for a successful sign-in or sign-up."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

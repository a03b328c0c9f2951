from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.sql import func
import enum
from app.database import Base


class Environment(str, enum.Enum):
    """Deployment environment a key belongs to."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class KeyType(str, enum.Enum):
    """Kind of application consuming the key."""
    ECOMMERCE_SITE = "ecommerce_site"
    INTERNAL_API = "internal_api"
    MOBILE_APP = "mobile_app"
    MISC = "misc"


class ApiKey(Base):
    """API key model - a stored third-party credential and its metadata."""

    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    key_value = Column(String, nullable=False)  # Secret, never logged
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)  # None = default project
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    environment = Column(SQLEnum(Environment), nullable=False, default=Environment.PRODUCTION)
    key_type = Column(SQLEnum(KeyType), nullable=True)
    provider = Column(String, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class UserSettings(Base):
    """User settings model - per-account dashboard preferences."""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    language = Column(String, default="fr", nullable=False)
    dark_mode = Column(Boolean, default=False, nullable=False)
    notifications = Column(Boolean, default=True, nullable=False)
    expiration_threshold = Column(Integer, default=30, nullable=False)  # Days
    hide_api_keys = Column(Boolean, default=True, nullable=False)
    two_factor_auth = Column(Boolean, default=False, nullable=False)
    notify_expiration = Column(Boolean, default=True, nullable=False)
    notify_new_key = Column(Boolean, default=True, nullable=False)
    notify_login = Column(Boolean, default=True, nullable=False)
    notification_duration = Column(Float, default=2.0, nullable=False)  # Seconds
    email_notifications = Column(Boolean, default=False, nullable=False)
    marketing_emails = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

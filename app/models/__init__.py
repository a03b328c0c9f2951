"""Database models."""
from app.models.user import User
from app.models.project import Project, ProjectMember, ProjectRole
from app.models.api_key import ApiKey, Environment, KeyType
from app.models.key_history import KeyHistory, HistoryAction
from app.models.user_settings import UserSettings

__all__ = [
    "User",
    "Project",
    "ProjectMember",
    "ProjectRole",
    "ApiKey",
    "Environment",
    "KeyType",
    "KeyHistory",
    "HistoryAction",
    "UserSettings",
]

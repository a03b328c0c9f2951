from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.sql import func
import enum
from app.database import Base
from app.models.mixins import ArchivableMixin


class ProjectRole(str, enum.Enum):
    """Role of a user within a project."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Project(ArchivableMixin, Base):
    """Project model - logical grouping of API keys."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ProjectMember(Base):
    """ProjectMember model - assigns users to projects with a role."""

    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(ProjectRole), nullable=False, default=ProjectRole.MEMBER)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

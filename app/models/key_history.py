from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum, JSON
import enum
from app.core.expiration import utcnow
from app.database import Base


class HistoryAction(str, enum.Enum):
    """Action recorded in the key history."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    VIEWED = "viewed"
    ROTATED = "rotated"


class KeyHistory(Base):
    """Key history model - audit trail of actions performed on API keys."""

    __tablename__ = "key_history"

    id = Column(Integer, primary_key=True, index=True)
    api_key_id = Column(Integer, ForeignKey("api_keys.id"), nullable=False, index=True)
    action = Column(SQLEnum(HistoryAction), nullable=False, index=True)
    performed_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Set client-side so entries written in the same second keep their order
    performed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    request_id = Column(String, nullable=True, index=True)  # UUID for request tracing

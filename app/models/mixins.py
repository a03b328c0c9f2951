"""
Database model mixins for common functionality.
"""
from sqlalchemy import Column, DateTime
from app.core.expiration import utcnow


class ArchivableMixin:
    """
    Mixin for soft delete by archiving.

    Adds an archived_at timestamp. Archived records stay in the table
    and are excluded from listings instead of being removed.
    """
    archived_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    def archive(self) -> None:
        """Mark the record as archived."""
        self.archived_at = utcnow()

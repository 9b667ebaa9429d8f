"""Append-only change log model for incremental sync"""

from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class DataType(str, Enum):
    DIARY = "diary"
    SYMPTOM = "symptom"
    PROFILE = "profile"
    ACHIEVEMENT = "achievement"
    REMINDER = "reminder"
    SETTINGS = "settings"


class ActionType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SyncChange(Base):
    """One mutation of a piece of user data. Rows are never updated or deleted."""

    __tablename__ = "sync_changes"

    # Integer id doubles as insertion order for equal timestamps
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    data_type = Column(String(20), nullable=False)
    action = Column(String(10), nullable=False)
    data = Column(JSON, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="sync_changes")

    __table_args__ = (
        Index("idx_sync_changes_user_timestamp", "user_id", "timestamp"),
        CheckConstraint(
            "data_type IN ('diary', 'symptom', 'profile', 'achievement', 'reminder', 'settings')",
            name="chk_sync_data_type",
        ),
        CheckConstraint("action IN ('create', 'update', 'delete')", name="chk_sync_action"),
    )

    def __repr__(self):
        return (
            f"<SyncChange(id={self.id}, user_id={self.user_id}, "
            f"data_type='{self.data_type}', action='{self.action}')>"
        )

"""Full snapshot backup model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.user import generate_uuid


class Backup(Base):
    """Immutable point-in-time snapshot of a user's app data"""

    __tablename__ = "backups"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    device_info = Column(String(255), nullable=True)
    version = Column(String(50), nullable=True)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="backups")

    __table_args__ = (
        Index("idx_backups_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Backup(id={self.id}, user_id={self.user_id}, file_name='{self.file_name}')>"

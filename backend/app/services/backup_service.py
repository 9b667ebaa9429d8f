"""Backup service - versioned full snapshots per user

Ownership is not checked here; callers compare Backup.user_id with the
authenticated user before returning or deleting anything.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import json

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.config import settings
from app.models.backup import Backup
from app.schemas.backup import BackupDataResponse, BackupResponse
import logging

logger = logging.getLogger(__name__)


def payload_size(payload: Dict[str, Any]) -> int:
    """UTF-8 byte length of the compact JSON serialization"""
    return len(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def backup_file_name(created_at: datetime) -> str:
    return f"backup_{created_at.isoformat(timespec='milliseconds')}Z.json"


class BackupService:
    """Service for backup snapshots"""

    @staticmethod
    def create_backup(
        db: Session,
        user_id: str,
        payload: Dict[str, Any],
        device_info: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Backup:
        """
        Store a snapshot

        Args:
            db: Database session
            user_id: Owner
            payload: Full snapshot (diaries, symptoms, profile, settings, ...)
            device_info: Optional client description
            version: Snapshot version, falls back to payload["version"]

        Returns:
            Created backup
        """
        now = datetime.utcnow()
        backup = Backup(
            user_id=user_id,
            file_name=backup_file_name(now),
            file_size=payload_size(payload),
            device_info=device_info,
            version=version or payload.get("version") or settings.DEFAULT_BACKUP_VERSION,
            data=payload,
            created_at=now,
        )
        db.add(backup)
        db.commit()
        db.refresh(backup)

        logger.info(f"Created backup {backup.id} for user {user_id} ({backup.file_size} bytes)")
        return backup

    @staticmethod
    def get_backup_by_id(db: Session, backup_id: str) -> Optional[Backup]:
        return db.query(Backup).filter(Backup.id == backup_id).first()

    @staticmethod
    def list_backups(db: Session, user_id: str) -> List[Backup]:
        """Backups of one user, newest first"""
        return (
            db.query(Backup)
            .filter(Backup.user_id == user_id)
            .order_by(Backup.created_at.desc())
            .all()
        )

    @staticmethod
    def delete_backup(db: Session, backup_id: str) -> bool:
        result = db.execute(delete(Backup).where(Backup.id == backup_id))
        db.commit()
        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info(f"Deleted backup {backup_id}")
        return deleted

    @staticmethod
    def to_response(backup: Backup) -> BackupResponse:
        return BackupResponse.model_validate(backup)

    @staticmethod
    def to_data_response(backup: Backup) -> BackupDataResponse:
        data = backup.data or {}
        return BackupDataResponse(
            diaries=data.get("diaries") or [],
            symptoms=data.get("symptoms") or [],
            profile=data.get("profile"),
            settings=data.get("settings"),
            version=backup.version,
            created_at=backup.created_at,
        )


backup_service = BackupService()

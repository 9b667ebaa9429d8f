"""Sync routes - full backups and incremental change log"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.orm import Session

from app.config import settings
from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.schemas.backup import BackupCreate, BackupResponse, BackupDataResponse
from app.schemas.sync import (
    IncrementalSyncRequest,
    SyncResultResponse,
    SyncChangesResponse,
    SyncStatusResponse,
)
from app.services.backup_service import backup_service
from app.services.sync_service import sync_service
from app.api.deps import get_current_user, ensure_owner
from app.models.backup import Backup
from app.models.user import User

router = APIRouter()


def _get_owned_backup(db: Session, backup_id: str, current_user: User) -> Backup:
    backup = backup_service.get_backup_by_id(db, backup_id)
    if not backup:
        raise ResourceNotFoundError("Backup")
    ensure_owner(backup.user_id, current_user)
    return backup


@router.post("/backup", response_model=BackupResponse, status_code=status.HTTP_201_CREATED)
def upload_backup(
    payload: BackupCreate,
    x_device_info: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Upload a full snapshot

    Args:
        payload: Snapshot body; diaries/symptoms must be lists, profile/settings objects
        x_device_info: Optional X-Device-Info header
        current_user: Current authenticated user
        db: Database session

    Returns:
        Backup metadata
    """
    backup = backup_service.create_backup(
        db,
        current_user.id,
        payload.model_dump(exclude_unset=True),
        device_info=x_device_info,
    )
    return backup_service.to_response(backup)


@router.get("/backup/{backup_id}", response_model=BackupDataResponse)
def download_backup(
    backup_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return snapshot contents; 404 if missing, 403 if owned by someone else"""
    backup = _get_owned_backup(db, backup_id, current_user)
    return backup_service.to_data_response(backup)


@router.get("/backups", response_model=List[BackupResponse])
def list_backups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    backups = backup_service.list_backups(db, current_user.id)
    return [backup_service.to_response(backup) for backup in backups]


@router.delete("/backup/{backup_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_backup(
    backup_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _get_owned_backup(db, backup_id, current_user)
    backup_service.delete_backup(db, backup_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/incremental", response_model=SyncResultResponse)
def sync_incremental(
    request: IncrementalSyncRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Store the device's local changes in the change log

    Args:
        request: Local changes and device id
        current_user: Current authenticated user
        db: Database session

    Returns:
        Synced and conflict counts with server time
    """
    return sync_service.submit_incremental(
        db,
        current_user.id,
        request.local_changes,
        device_id=request.device_id,
    )


@router.get("/changes", response_model=SyncChangesResponse)
def get_changes(
    since: Optional[datetime] = Query(None, description="Return changes strictly after this time"),
    limit: Optional[int] = Query(None, ge=1, le=settings.SYNC_CHANGES_MAX_LIMIT),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get server changes since the client's cursor

    Args:
        since: Last timestamp the client has seen; epoch when omitted
        limit: Page size, SYNC_CHANGES_DEFAULT_LIMIT when omitted
        current_user: Current authenticated user
        db: Database session

    Returns:
        Changes partitioned by data type
    """
    return sync_service.get_changes_since(
        db,
        current_user.id,
        since=since,
        limit=limit or settings.SYNC_CHANGES_DEFAULT_LIMIT,
    )


@router.get("/status", response_model=SyncStatusResponse)
def get_sync_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return sync_service.get_sync_status(db, current_user.id)

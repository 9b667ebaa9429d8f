"""Sync reconciliation service - incremental submit and changes-since queries"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.metrics import SYNC_CHANGES_APPENDED
from app.models.sync import ActionType, DataType, SyncChange
from app.schemas.sync import (
    LocalChanges,
    SyncChangesResponse,
    SyncResultResponse,
    SyncStatusResponse,
)
from app.services.change_log_service import change_log_service
import logging

logger = logging.getLogger(__name__)


class SyncService:
    """
    Query-side reconciliation over the change log.

    Clients push their local edits with submit_incremental and pull
    everything newer than their last-seen timestamp with get_changes_since.
    No merging or conflict detection happens on the server.
    """

    @staticmethod
    def _batch_entries(local_changes: LocalChanges) -> List[Tuple[DataType, ActionType, Dict[str, Any]]]:
        entries = []
        for diary in local_changes.diaries:
            entries.append((DataType.DIARY, ActionType.UPDATE, diary))
        for symptom in local_changes.symptoms:
            entries.append((DataType.SYMPTOM, ActionType.UPDATE, symptom))
        if local_changes.profile:
            entries.append((DataType.PROFILE, ActionType.UPDATE, local_changes.profile))
        # Deletions carry only an id, so they are all logged as diary deletes
        for deleted_id in local_changes.deleted_ids:
            entries.append((DataType.DIARY, ActionType.DELETE, {"id": deleted_id}))
        return entries

    @staticmethod
    def submit_incremental(
        db: Session,
        user_id: str,
        local_changes: LocalChanges,
        device_id: Optional[str] = None,
    ) -> SyncResultResponse:
        """
        Append a client's local changes to the change log

        Args:
            db: Database session
            user_id: Authenticated user
            local_changes: Diaries, symptoms, profile and deleted ids
            device_id: Submitting device, for logging only

        Returns:
            Number of changes stored; conflicts are always empty
        """
        entries = SyncService._batch_entries(local_changes)
        changes = change_log_service.append_changes(db, user_id, entries)

        for data_type, action, _ in entries:
            SYNC_CHANGES_APPENDED.labels(data_type.value, action.value).inc()

        logger.info(f"Synced {len(changes)} changes for user {user_id} from device {device_id or 'unknown'}")
        return SyncResultResponse(
            success=True,
            synced_count=len(changes),
            conflict_count=0,
            conflicts=[],
            server_time=datetime.utcnow(),
        )

    @staticmethod
    def partition_changes(changes: List[SyncChange]) -> Dict[str, Any]:
        """Group change payloads by data type; profile and settings keep the last one"""
        grouped: Dict[str, Any] = {
            "diaries": [],
            "symptoms": [],
            "profile": None,
            "achievements": [],
            "reminders": [],
            "settings": None,
        }
        for change in changes:
            if change.data_type == DataType.DIARY.value:
                grouped["diaries"].append(change.data)
            elif change.data_type == DataType.SYMPTOM.value:
                grouped["symptoms"].append(change.data)
            elif change.data_type == DataType.PROFILE.value:
                grouped["profile"] = change.data
            elif change.data_type == DataType.ACHIEVEMENT.value:
                grouped["achievements"].append(change.data)
            elif change.data_type == DataType.REMINDER.value:
                grouped["reminders"].append(change.data)
            elif change.data_type == DataType.SETTINGS.value:
                grouped["settings"] = change.data
        return grouped

    @staticmethod
    def get_changes_since(
        db: Session,
        user_id: str,
        since: Optional[datetime] = None,
        limit: int = 100,
    ) -> SyncChangesResponse:
        """
        Changes newer than `since`, partitioned by data type

        Args:
            db: Database session
            user_id: Authenticated user
            since: Client cursor; epoch when omitted
            limit: Page size

        Returns:
            Partitioned payloads, has_more and the cursor for the next page
        """
        # One extra row tells whether anything is left beyond this page
        changes = change_log_service.get_changes_since(db, user_id, since, limit=limit + 1)
        has_more = len(changes) > limit
        page = changes[:limit]

        grouped = SyncService.partition_changes(page)
        return SyncChangesResponse(
            **grouped,
            server_time=datetime.utcnow(),
            has_more=has_more,
            next_since=page[-1].timestamp if page else None,
        )

    @staticmethod
    def get_sync_status(db: Session, user_id: str) -> SyncStatusResponse:
        latest = change_log_service.get_latest_change(db, user_id)
        return SyncStatusResponse(
            last_sync_time=latest.timestamp if latest else None,
            pending_changes=0,
            is_syncing=False,
            server_time=datetime.utcnow(),
        )


sync_service = SyncService()

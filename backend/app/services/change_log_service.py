"""Change log service - append-only per-user mutation records"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.database import to_naive_utc
from app.models.sync import ActionType, DataType, SyncChange
import logging

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)
_TICK = timedelta(microseconds=1)


class ChangeLogService:
    """Append and query SyncChange rows. Never updates or deletes them."""

    @staticmethod
    def get_latest_change(db: Session, user_id: str) -> Optional[SyncChange]:
        return (
            db.query(SyncChange)
            .filter(SyncChange.user_id == user_id)
            .order_by(SyncChange.timestamp.desc(), SyncChange.id.desc())
            .first()
        )

    @staticmethod
    def _next_timestamp(db: Session, user_id: str) -> datetime:
        """Current time, bumped past the user's latest change if the clock has not moved"""
        now = datetime.utcnow()
        latest = ChangeLogService.get_latest_change(db, user_id)
        if latest is not None:
            latest_ts = to_naive_utc(latest.timestamp)
            if latest_ts >= now:
                now = latest_ts + _TICK
        return now

    @staticmethod
    def append_changes(
        db: Session,
        user_id: str,
        entries: Iterable[Tuple[DataType, ActionType, Dict[str, Any]]],
    ) -> List[SyncChange]:
        """
        Append a batch of changes in one commit

        Each entry gets a strictly larger timestamp than the one before it.

        Args:
            db: Database session
            user_id: Owner of the changes
            entries: (data_type, action, data) tuples in submission order

        Returns:
            Persisted changes
        """
        timestamp = ChangeLogService._next_timestamp(db, user_id)
        changes = []
        for data_type, action, data in entries:
            change = SyncChange(
                user_id=user_id,
                data_type=DataType(data_type).value,
                action=ActionType(action).value,
                data=data,
                timestamp=timestamp,
            )
            db.add(change)
            changes.append(change)
            timestamp = timestamp + _TICK

        if changes:
            db.commit()
            for change in changes:
                db.refresh(change)
        return changes

    @staticmethod
    def add_sync_change(
        db: Session,
        user_id: str,
        data_type: DataType,
        action: ActionType,
        data: Dict[str, Any],
    ) -> SyncChange:
        return ChangeLogService.append_changes(db, user_id, [(data_type, action, data)])[0]

    @staticmethod
    def get_changes_since(
        db: Session,
        user_id: str,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[SyncChange]:
        """
        Changes with timestamp strictly after `since`, oldest first

        Args:
            db: Database session
            user_id: Owner of the changes
            since: Cursor; defaults to the epoch
            limit: Maximum rows to return, all when None

        Returns:
            Changes ordered by timestamp then insertion order
        """
        cursor = to_naive_utc(since) if since is not None else EPOCH
        query = (
            db.query(SyncChange)
            .filter(SyncChange.user_id == user_id, SyncChange.timestamp > cursor)
            .order_by(SyncChange.timestamp.asc(), SyncChange.id.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


change_log_service = ChangeLogService()

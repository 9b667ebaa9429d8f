"""Incremental sync schemas"""

from pydantic import BaseModel, Field
from typing import Optional, Any, Dict, List
from datetime import datetime


class LocalChanges(BaseModel):
    """Changes made on the device since its last sync"""
    diaries: List[Dict[str, Any]] = Field(default_factory=list)
    symptoms: List[Dict[str, Any]] = Field(default_factory=list)
    profile: Optional[Dict[str, Any]] = None
    deleted_ids: List[str] = Field(default_factory=list)


class IncrementalSyncRequest(BaseModel):
    last_sync_time: Optional[datetime] = None
    local_changes: LocalChanges
    device_id: Optional[str] = None


class SyncConflict(BaseModel):
    """Reserved; conflicts are not detected yet"""
    id: str
    data_type: str
    local_data: Dict[str, Any]
    server_data: Dict[str, Any]
    local_modified_at: datetime
    server_modified_at: datetime


class SyncResultResponse(BaseModel):
    success: bool = True
    synced_count: int
    conflict_count: int = 0
    conflicts: List[SyncConflict] = Field(default_factory=list)
    server_time: datetime


class SyncChangesResponse(BaseModel):
    """Server-side changes partitioned by data type"""
    diaries: List[Dict[str, Any]] = Field(default_factory=list)
    symptoms: List[Dict[str, Any]] = Field(default_factory=list)
    profile: Optional[Dict[str, Any]] = None
    achievements: List[Dict[str, Any]] = Field(default_factory=list)
    reminders: List[Dict[str, Any]] = Field(default_factory=list)
    settings: Optional[Dict[str, Any]] = None
    server_time: datetime
    has_more: bool = False
    next_since: Optional[datetime] = None


class SyncStatusResponse(BaseModel):
    last_sync_time: Optional[datetime] = None
    pending_changes: int = 0
    is_syncing: bool = False
    server_time: datetime

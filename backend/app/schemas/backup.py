"""Backup schemas"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, Any, Dict, List
from datetime import datetime


class BackupCreate(BaseModel):
    """Uploaded snapshot; unknown top-level keys are kept as sent"""
    model_config = ConfigDict(extra="allow")

    diaries: List[Dict[str, Any]] = []
    symptoms: List[Dict[str, Any]] = []
    profile: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None
    version: Optional[str] = None


class BackupResponse(BaseModel):
    """Backup metadata; never includes the snapshot itself"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    file_size: int
    device_info: Optional[str] = None
    version: Optional[str] = None
    created_at: datetime


class BackupDataResponse(BaseModel):
    """Snapshot contents returned on download"""
    diaries: List[Dict[str, Any]] = []
    symptoms: List[Dict[str, Any]] = []
    profile: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None
    version: Optional[str] = None
    created_at: datetime

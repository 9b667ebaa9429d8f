"""Pydantic schemas for API validation"""

from app.schemas.user import (
    UserCreate,
    UserLogin,
    UserResponse,
    AuthUser,
    TokenResponse,
    TokenPayload,
    RefreshTokenRequest,
    LogoutRequest,
)
from app.schemas.backup import BackupCreate, BackupResponse, BackupDataResponse
from app.schemas.sync import (
    LocalChanges,
    IncrementalSyncRequest,
    SyncConflict,
    SyncResultResponse,
    SyncChangesResponse,
    SyncStatusResponse,
)
from app.schemas.response import APIResponse, ErrorResponse, HealthResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "AuthUser", "TokenResponse", "TokenPayload",
    "RefreshTokenRequest", "LogoutRequest",
    "BackupCreate", "BackupResponse", "BackupDataResponse",
    "LocalChanges", "IncrementalSyncRequest", "SyncConflict",
    "SyncResultResponse", "SyncChangesResponse", "SyncStatusResponse",
    "APIResponse", "ErrorResponse", "HealthResponse",
]

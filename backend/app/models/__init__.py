"""Database models"""

from app.models.user import User
from app.models.security import RefreshToken
from app.models.sync import SyncChange, DataType, ActionType
from app.models.backup import Backup

__all__ = ["User", "RefreshToken", "SyncChange", "DataType", "ActionType", "Backup"]

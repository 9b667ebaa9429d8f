"""User service - handles user management and credential checks"""

from functools import lru_cache
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
from app.models.user import User
from app.schemas.user import UserCreate
from app.core.security import get_password_hash, verify_password
from app.core.exceptions import (
    InvalidCredentialsError,
    DuplicateEmailError,
)
import logging

logger = logging.getLogger(__name__)


@lru_cache()
def _dummy_password_hash() -> str:
    """Digest checked for unknown emails so both login failures cost one bcrypt round"""
    return get_password_hash("unknown-user-placeholder")


class UserService:
    """Service for user management"""

    @staticmethod
    def create_user(
        db: Session,
        user_data: UserCreate,
        duplicate_message: Optional[str] = None,
        commit: bool = True,
    ) -> User:
        """
        Create new user

        Args:
            db: Database session
            user_data: User creation data
            duplicate_message: Error message used when the email is taken
            commit: When False the row is only flushed; the caller commits

        Returns:
            Created user

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        message = duplicate_message or "Email already registered"
        existing = UserService.get_user_by_email(db, user_data.email)
        if existing:
            raise DuplicateEmailError(message)

        user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            name=user_data.name,
        )

        db.add(user)
        try:
            if commit:
                db.commit()
            else:
                db.flush()
        except IntegrityError:
            # A concurrent registration won the unique email index
            db.rollback()
            raise DuplicateEmailError(message)
        db.refresh(user)

        logger.info(f"Created user: {user.id}")
        return user

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> User:
        """
        Authenticate user by email and password

        Unknown email and wrong password raise the same error after the
        same bcrypt work.

        Args:
            db: Database session
            email: Email address
            password: Password

        Returns:
            Authenticated user
        """
        user = UserService.get_user_by_email(db, email)

        if not user:
            verify_password(password, _dummy_password_hash())
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        logger.info(f"User authenticated: {user.id}")
        return user

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_all_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.created_at.asc()).all()

    @staticmethod
    def delete_user(db: Session, user_id: str) -> bool:
        """
        Delete user together with its refresh tokens, backups and change log

        Args:
            db: Database session
            user_id: User ID

        Returns:
            True if a user was removed
        """
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            return False

        db.delete(user)
        db.commit()

        logger.info(f"Deleted user: {user_id}")
        return True


# Singleton instance
user_service = UserService()

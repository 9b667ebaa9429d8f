"""User management routes"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.schemas.user import UserCreate, UserResponse
from app.services.user_service import user_service
from app.api.deps import get_current_user
from app.models.user import User

router = APIRouter()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get a user by id

    Args:
        user_id: User ID
        current_user: Current authenticated user
        db: Database session

    Returns:
        User without password digest
    """
    user = user_service.get_user_by_id(db, user_id)
    if not user:
        raise ResourceNotFoundError("User")
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse])
def get_all_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    users = user_service.get_all_users(db)
    return [UserResponse.model_validate(user) for user in users]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create new user

    Args:
        user_data: User creation data
        current_user: Current authenticated user
        db: Database session

    Returns:
        Created user
    """
    user = user_service.create_user(db, user_data, duplicate_message="Email already exists")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete user and everything it owns

    Args:
        user_id: User ID
        current_user: Current authenticated user
        db: Database session
    """
    if not user_service.delete_user(db, user_id):
        raise ResourceNotFoundError("User")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from typing import Any
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_registry
from app.domain.registry import SchemaRegistry
from app.models.user import User
from app.schemas.user_schemas import UserResponse
from app.services.user_service import UserService

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    registry: SchemaRegistry = Depends(get_registry),
):
    """
    Register a new business account.

    - username must be unique
    - password is stored as a bcrypt hash and never returned
    """
    service = UserService(db, registry)
    return service.register(payload)


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    """Get the authenticated account"""
    return user


@router.patch("/me", response_model=UserResponse)
def update_me(
    payload: Any = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: SchemaRegistry = Depends(get_registry),
):
    """Update profile fields; only provided fields change"""
    service = UserService(db, registry)
    return service.update_user(user, payload)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: SchemaRegistry = Depends(get_registry),
):
    """
    Delete the authenticated account.

    - Returns 409 while the account still owns any record
    """
    service = UserService(db, registry)
    service.delete_user(user)

"""
User management endpoints.

Listing users and creating users (including admins) is admin-only. Reading,
updating and deleting a user, and applying to jobs, is allowed for admins
and for the user themself.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import TokenUser, require_admin, require_admin_or_self
from app.core.security import create_token
from app.crud import user as user_crud
from app.schemas.user import (
    UserCreateRequest,
    UserUpdateRequest,
    UserEnvelope,
    UserCreatedResponse,
    UserListResponse,
    UserDeletedResponse,
    ApplicationResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)


@router.post("", status_code=201, response_model=UserCreatedResponse)
def create_user(
    request: UserCreateRequest,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    """
    Add a new user (admin only). Unlike /auth/register this can create admins.

    Returns {user: {username, firstName, lastName, email, isAdmin}, token}
    """
    user = user_crud.register(db, request.model_dump(by_alias=True))
    logger.info(f"Admin {admin.username} created user {user['username']}")
    return {"user": user, "token": create_token(user)}


@router.get("", response_model=UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    return {"users": user_crud.find_all(db)}


@router.get("/{username}", response_model=UserEnvelope)
def get_user(
    username: str,
    db: Session = Depends(get_db),
    current: TokenUser = Depends(require_admin_or_self),
):
    """Returns {user: {username, firstName, lastName, email, isAdmin, jobs}}"""
    return {"user": user_crud.get(db, username)}


@router.patch("/{username}", response_model=UserEnvelope)
def update_user(
    username: str,
    request: UserUpdateRequest,
    db: Session = Depends(get_db),
    current: TokenUser = Depends(require_admin_or_self),
):
    """
    Partially update a user.

    Fields can be: {firstName, lastName, password, email}
    """
    user_crud.update(db, username, request.model_dump(by_alias=True, exclude_unset=True))
    return {"user": user_crud.get(db, username)}


@router.delete("/{username}", response_model=UserDeletedResponse)
def delete_user(
    username: str,
    db: Session = Depends(get_db),
    current: TokenUser = Depends(require_admin_or_self),
):
    user_crud.remove(db, username)
    return {"deleted": username}


@router.post("/{username}/jobs/{job_id}", response_model=ApplicationResponse)
def apply_to_job(
    username: str,
    job_id: int,
    db: Session = Depends(get_db),
    current: TokenUser = Depends(require_admin_or_self),
):
    """Apply to a job. Returns {applied: job_id}"""
    user_crud.apply_to_job(db, username, job_id)
    return {"applied": job_id}

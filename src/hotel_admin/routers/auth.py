import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy.orm import Session

from hotel_admin.db import get_db
from hotel_admin.dependencies.authz import get_current_user
from hotel_admin.models.user import User as DBUser
from hotel_admin.schemas.auth_schemas import (
    TokenResponse,
    UserResponse,
)
from hotel_admin.utils import auth as auth_utils
from hotel_admin.utils.admin_access import is_admin_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
# module-level dependency to avoid calling Depends() inside function defaults
db_dependency = Depends(get_db)
current_user_dependency = Depends(get_current_user)


def _user_response_dict(user: DBUser) -> dict:
    """Build a consistent user response dict for auth endpoints."""
    return {
        "username": user.username,
        "full_name": user.full_name,
        "email": user.email,
        "role": user.role_name,
        "is_admin": is_admin_user(user),
    }


@router.post(
    "/login",
    summary="Login with username/password",
    description="Authenticate against the local user store and receive access and refresh JWTs.",
    response_model=TokenResponse,
)
def login(
    username: Annotated[str, Form(description="Username for authentication (e.g., frontdesk01)")],
    password: Annotated[
        str,
        Form(description="User password (e.g., SuperSecret123)", json_schema_extra={"format": "password"}),
    ],
    db: Session = db_dependency,
):
    user = auth_utils.authenticate_user(db, username, password)
    if not user:
        logger.warning(f"Failed login attempt for {username}")
        raise HTTPException(status_code=401, detail="invalid credentials", headers={"WWW-Authenticate": "Bearer"})

    user.last_login = datetime.now(UTC)
    db.commit()

    access_token = auth_utils.create_access_token(user)
    refresh_token = auth_utils.create_refresh_token(user)
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": _user_response_dict(user),
    }


@router.get(
    "/me",
    summary="Get current user info",
    description="Return the active user's profile, including the staff role and admin flag.",
    response_model=UserResponse,
)
def me(user: DBUser = current_user_dependency):
    return _user_response_dict(user)


@router.post(
    "/token/refresh",
    summary="Refresh an access token using a REFRESH JWT",
    description="Validate a refresh token, enforce token versioning, and return rotated JWTs.",
    response_model=TokenResponse,
)
def token_refresh(
    refresh_token: Annotated[str, Form(description="JWT refresh token (e.g., eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9)")],
    db: Session = db_dependency,
):
    payload = auth_utils.decode_jwt(refresh_token)
    if not payload or payload.get("type") != auth_utils.REFRESH_TOKEN:
        raise HTTPException(401, "invalid refresh token", headers={"WWW-Authenticate": "Bearer"})

    user = auth_utils.get_user(db, payload.get("sub"))
    if not user:
        raise HTTPException(401, "user not found")

    if not user.is_active:
        raise HTTPException(401, "Your account has been deactivated. Please contact an administrator.")

    # version check enforces stateless revocation for refresh tokens
    if payload.get("ver") != user.token_version:
        raise HTTPException(401, "refresh token no longer valid (revoked)")

    new_access = auth_utils.create_access_token(user)
    new_refresh = auth_utils.create_refresh_token(user)
    return {"access_token": new_access, "refresh_token": new_refresh, "token_type": "bearer"}


@router.post(
    "/logout-all",
    summary="Revoke every token issued to the current user",
    description="Bump the user's token version so existing access and refresh tokens stop validating.",
)
def logout_all(user: DBUser = current_user_dependency, db: Session = db_dependency):
    auth_utils.revoke_user_tokens(db, user)
    return {"detail": "all tokens revoked"}

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hotel_admin.db import get_db
from hotel_admin.models.user import User as DBUser
from hotel_admin.utils.admin_access import is_admin_user
from hotel_admin.utils.auth import ACCESS_TOKEN, decode_jwt, get_user

bearer = HTTPBearer(auto_error=False)


# Module-level dependency object to avoid calling Depends() in function defaults
bearer_dep = Depends(bearer)
db_dep = Depends(get_db)


def get_current_user(
    cred: HTTPAuthorizationCredentials = bearer_dep,
    db: Session = db_dep,
) -> DBUser:
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(401, "missing or invalid authorization header", headers={"WWW-Authenticate": "Bearer"})

    payload = decode_jwt(cred.credentials)
    if not payload or payload.get("type") != ACCESS_TOKEN:
        raise HTTPException(401, "invalid or expired token", headers={"WWW-Authenticate": "Bearer"})

    user = get_user(db, payload.get("sub"))
    if not user or not user.is_active:
        raise HTTPException(401, "user not found or inactive")

    if payload.get("ver") != user.token_version:
        raise HTTPException(401, "token no longer valid (revoked)")

    return user


# Module-level dependency object to avoid calling Depends() in function defaults
current_user_dependency = Depends(get_current_user)


def require_admin(user: DBUser = current_user_dependency) -> DBUser:
    if not is_admin_user(user):
        raise HTTPException(403, "Access denied. Admin privileges required.")
    return user

"""
Local user store helpers: argon2 password hashing and versioned JWTs.

Every token carries the user's ``token_version`` (``ver``); bumping the version on the
user row revokes all tokens issued before it.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from functools import lru_cache

import jwt
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher
from sqlalchemy import func
from sqlalchemy.orm import Session

from hotel_admin.dependencies.permission_store import get_settings
from hotel_admin.models.user import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


@lru_cache
def _password_hasher() -> PasswordHash:
    settings = get_settings()
    return PasswordHash(
        (
            Argon2Hasher(
                time_cost=settings.argon2_time_cost,
                memory_cost=settings.argon2_memory_cost,
                parallelism=settings.argon2_parallelism,
            ),
        )
    )


def hash_password(password: str) -> str:
    return _password_hasher().hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return _password_hasher().verify(plain, hashed)
    except Exception:
        logger.debug("Password verification failed on a malformed hash")
        return False


def _issue_token(user: User, token_type: str, ttl: int) -> str:
    settings = get_settings()
    now = datetime.now(UTC)
    payload = {
        "sub": user.username,
        "role": user.role_name,
        "ver": user.token_version,
        "type": token_type,  # refresh tokens are rejected as bearer credentials
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl)).timestamp()),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)


def create_access_token(user: User, ttl: int | None = None) -> str:
    return _issue_token(user, ACCESS_TOKEN, ttl or get_settings().jwt_ttl)


def create_refresh_token(user: User, ttl: int | None = None) -> str:
    return _issue_token(user, REFRESH_TOKEN, ttl or get_settings().jwt_refresh_ttl)


def decode_jwt(token: str) -> dict | None:
    """Claims of a valid token, or None when it is expired, tampered with or malformed."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
    except jwt.InvalidTokenError as exc:
        logger.debug("JWT rejected: %s", exc)
        return None


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def get_user(db: Session, username: str) -> User | None:
    normalized = normalize_username(username)
    if not normalized:
        return None
    return db.query(User).filter(func.lower(User.username) == normalized).one_or_none()


def create_user(db: Session, username: str, password: str, role_name: str, full_name: str | None = None) -> User:
    """Create a user, or reset the password and role of an existing one."""
    user = get_user(db, username)
    if user is None:
        user = User(username=normalize_username(username), full_name=full_name)
        db.add(user)
    elif full_name:
        user.full_name = full_name
    user.password_hash = hash_password(password)
    user.role_name = role_name
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    user = get_user(db, username)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        return None
    return user


def revoke_user_tokens(db: Session, user: User) -> User:
    user.token_version += 1
    db.commit()
    db.refresh(user)
    logger.info("Revoked all tokens for %s (token_version=%d)", user.username, user.token_version)
    return user

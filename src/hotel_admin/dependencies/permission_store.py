import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hotel_admin.external_services.permission_store_client import PermissionStoreClient

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "Hotel Admin API"
    version: str = "0.1.0"
    debug: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    admin_role_name: str = "Admin"
    permission_store_base_url: str = "http://localhost:8001/api"
    permission_store_token: str | None = None
    permission_store_timeout: float = 30.0
    redis_url: str = "redis://localhost:6379/0"

    # Tokens and password hashing
    jwt_secret: str = "change_this_secret"  # openssl rand -hex 32
    jwt_alg: str = "HS256"
    jwt_ttl: int = 86_400  # access token seconds
    jwt_refresh_ttl: int = 604_800  # refresh token seconds
    argon2_time_cost: int = 2
    argon2_memory_cost: int = 32_768  # KiB
    argon2_parallelism: int = 2

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("debug", mode="before")
    @classmethod
    def _coerce_debug(cls, value):
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in {"1", "true", "yes", "on"}:
                return True
            if normalized in {"0", "false", "no", "off"}:
                return False
            # Treat common logging level strings as non-debug defaults instead of erroring.
            if normalized in {"warn", "warning", "info", "error", "critical"}:
                return False
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def _get_cached_client(base_url: str, token: str | None, timeout: float) -> PermissionStoreClient:
    return PermissionStoreClient(base_url=base_url, token=token, timeout=timeout)


def get_permission_store_client(base_url: str | None = None, token: str | None = None) -> PermissionStoreClient:
    """Return a cached client for the remote permission store; arguments override the configured values."""
    settings = get_settings()
    base_url = base_url or settings.permission_store_base_url
    logger.debug("Using permission store at %s", base_url)
    return _get_cached_client(base_url, token or settings.permission_store_token, settings.permission_store_timeout)


def reset_permission_store_client() -> None:
    """Forget cached clients; call after their shared httpx clients are closed."""
    _get_cached_client.cache_clear()

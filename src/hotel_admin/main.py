import asyncio
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend
from redis import asyncio as aioredis

from hotel_admin.dependencies.permission_store import get_settings, reset_permission_store_client
from hotel_admin.external_services.permission_store_client import close_shared_clients

logger = logging.getLogger(__name__)

load_dotenv()


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    # Initialize FastAPI Cache with Redis backend
    redis_url = get_settings().redis_url
    redis_client = aioredis.from_url(redis_url, encoding="utf8", decode_responses=True)
    FastAPICache.init(RedisBackend(redis_client), prefix="api-cache")
    logger.info(f"FastAPI Cache initialized with Redis at {redis_url}")

    try:
        yield
    except asyncio.CancelledError:
        logger.info("Application shutdown requested (CancelledError). Exiting gracefully.")
    except Exception:
        logger.exception("Unhandled exception during application lifespan shutdown.")
        raise
    finally:
        await close_shared_clients()
        reset_permission_store_client()
        await redis_client.aclose()
        logger.info("Redis connection closed")


settings = get_settings()

tags_metadata = [
    {"name": "Root", "description": "Basic status endpoint."},
    {"name": "Auth", "description": "Authentication and token management endpoints."},
    {
        "name": "Menu_Permissions",
        "description": "Menu definitions, per-role menu visibility and the cascading permission toggle. Write endpoints are 🔒 **Admin Only**.",
    },
    {"name": "Health", "description": "Liveness, readiness and database health probes."},
]

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    openapi_tags=tags_metadata,
    docs_url="/swagger",
    swagger_ui_parameters={"displayRequestDuration": True, "persistAuthorization": True},
    redoc_url="/redoc",
    lifespan=_lifespan,
)


# Basic root endpoint
@app.get("/", tags=["Root"])
async def root():
    return {"message": settings.app_name}


# Set up GZip compression middleware (BEFORE CORS)
app.add_middleware(
    GZipMiddleware,
    minimum_size=1000,  # Only compress responses > 1KB
    compresslevel=6,
)

cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

logger.info(f"CORS enabled for origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routers
from .routers import (  # noqa: E402
    auth,
    health,
    menu_permissions,
)

app.include_router(auth.router)
app.include_router(health.router)
app.include_router(menu_permissions.router)


__all__ = ["app"]

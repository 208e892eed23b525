import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Build DATABASE_URL from env or use DATABASE_URL if provided
DB_NAME = os.environ.get("DB_NAME", os.environ.get("DB", "hotel_admin"))
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"postgresql+psycopg://{os.environ.get('DB_USER', 'postgres')}:{os.environ.get('DB_PASS', 'postgres')}@{os.environ.get('DB_HOST', 'localhost')}:{os.environ.get('DB_PORT', '5432')}/{DB_NAME}",
)

# Lazy engine creation to avoid environment races (tests set DATABASE_URL before import)
_engine = None


def _engine_kwargs(url: str) -> dict:
    # SQLite connections are shared between the event loop and FastAPI's threadpool
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
    return _engine


def recreate_engine(new_database_url: str | None = None):
    """
    Re-create the SQLAlchemy engine with an optional new DATABASE_URL.

    Safe to call from test setup or admin scripts when the environment changes. It
    updates the module-level `engine` and re-binds `SessionLocal`.
    """
    global _engine, engine, DATABASE_URL
    if new_database_url:
        DATABASE_URL = new_database_url
    if _engine is not None:
        _engine.dispose()
    _engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
    engine = _engine
    SessionLocal.configure(bind=engine)
    return engine


engine = get_engine()

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Import models package to register models with Base
import hotel_admin.models  # noqa: E402, F401

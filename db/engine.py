from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from settings.config import settings

_engine: AsyncEngine | None = None


def create_engine_for_url(url: str) -> AsyncEngine:
    """
    Build an AsyncEngine for `url`. SQLite gets foreign key enforcement and
    no pool sizing (its pools do not accept those arguments).
    """
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(url)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _):  # pragma: no cover - driver bridge
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

        return engine
    return create_async_engine(
        url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_engine_for_url(settings.DATABASE_URL)
    return _engine

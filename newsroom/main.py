import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from newsroom.config import settings
from newsroom.core.middleware import setup_middleware

logger = logging.getLogger(__name__)

_tables_created = False


async def ensure_tables():
    """Create DB tables if they haven't been created yet."""
    global _tables_created
    if _tables_created:
        return
    try:
        from newsroom.db.base import Base
        from newsroom.db.engine import engine
        import newsroom.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        _tables_created = True
    except Exception as e:
        logger.warning("Table creation skipped: %s", e)


async def _purge_trash_on_startup():
    """Drop soft-deleted bulletins and rows that are past the retention window."""
    from newsroom.db.engine import async_session_factory
    from newsroom.services.trash_service import purge_expired

    try:
        async with async_session_factory() as db:
            counts = await purge_expired(db)
            await db.commit()
        if counts["bulletins"] or counts["rows"]:
            logger.info("Purged expired trash: %s", counts)
    except Exception as e:
        logger.warning("Trash purge on startup failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await ensure_tables()
    await _purge_trash_on_startup()
    yield


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Newsroom Rundown API",
        version="0.1.0",
        description="Bulletin running orders with live timing",
        debug=settings.APP_DEBUG,
        lifespan=lifespan,
    )

    setup_middleware(app)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    # Register API routers
    from newsroom.api.v1 import router as api_v1_router
    app.include_router(api_v1_router, prefix="/api/v1")

    return app


app = create_app()

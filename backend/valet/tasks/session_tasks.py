"""
Celery tasks: session housekeeping.

Expired rows are already ignored by the session lookup; this only keeps
the ``user_sessions`` table from growing without bound.
"""

from __future__ import annotations

import asyncio

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from valet.core.config import settings
from valet.repositories import sessions as session_repository
from valet.tasks import celery_app

logger = structlog.get_logger("tasks.sessions")


async def _purge() -> int:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as db:
            removed = await session_repository.purge_expired(db)
            await db.commit()
        return removed
    finally:
        await engine.dispose()


@celery_app.task(name="valet.tasks.session_tasks.purge_expired_sessions")
def purge_expired_sessions() -> int:
    removed = asyncio.run(_purge())
    logger.info("Expired sessions purged", removed=removed)
    return removed

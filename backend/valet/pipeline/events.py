"""
Run event log.

The Celery worker and the API run in different processes, so run
progress is published through the ``pipeline_run_events`` table rather
than an in-memory emitter. The worker appends; the SSE endpoint polls
for rows with ``seq`` greater than the last one it sent.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from valet.core.constants import RunEventType
from valet.db.models.pipeline_run_event import PipelineRunEvent


async def append_event(
    db: AsyncSession,
    run_id: uuid.UUID,
    event_type: RunEventType,
    payload: dict[str, Any] | None = None,
) -> PipelineRunEvent:
    event = PipelineRunEvent(run_id=run_id, event_type=event_type.value, payload=payload or {})
    db.add(event)
    await db.flush()
    return event


async def list_events(
    db: AsyncSession,
    run_id: uuid.UUID,
    *,
    after_seq: int = 0,
    limit: int = 200,
) -> list[PipelineRunEvent]:
    """Events of a run with ``seq > after_seq``, oldest first."""
    stmt = (
        select(PipelineRunEvent)
        .where(PipelineRunEvent.run_id == run_id, PipelineRunEvent.seq > after_seq)
        .order_by(PipelineRunEvent.seq)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


def event_message(event: PipelineRunEvent) -> dict[str, Any]:
    """Client-facing shape: ``{"type": ..., **payload}``."""
    return {"type": event.event_type, **(event.payload or {})}

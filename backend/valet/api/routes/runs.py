"""
Pipeline run endpoints: start, history, detail and live progress.

Runs execute in the Celery worker. Progress reaches the browser through
``GET /runs/{run_id}/stream``, a Server-Sent Events response that polls
the run event log.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from valet.api.deps import get_current_user, get_db, get_session_factory, not_found, parse_uuid
from valet.api.routes.pipelines import get_owned_pipeline
from valet.api.schemas.pipelines import RunCreateRequest, RunDetailResponse, RunResponse
from valet.core.config import settings
from valet.core.constants import TERMINAL_RUN_STATUSES, RunEventType, RunStatus
from valet.core.logging import get_logger
from valet.db.models.user import User
from valet.pipeline.events import event_message, list_events
from valet.repositories import pipelines as pipeline_repository
from valet.repositories import runs as run_repository
from valet.tasks import pipeline_tasks

logger = get_logger(__name__)

router = APIRouter(tags=["Runs"])

SSE_EVENT_NAME = "update"
KEEPALIVE_EVERY = 20  # idle polls


def format_sse(data: dict[str, Any], event_id: int | None = None) -> str:
    lines = [f"event: {SSE_EVENT_NAME}"]
    if event_id is not None:
        lines.append(f"id: {event_id}")
    lines.append(f"data: {json.dumps(data, default=str)}")
    return "\n".join(lines) + "\n\n"


# ─── Start / list ─────────────────────────────────────────
@router.post("/pipelines/{pipeline_id}/runs", status_code=status.HTTP_201_CREATED)
async def start_run(
    pipeline_id: str,
    payload: RunCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    Create a pending run and queue it.

    Template defaults fill in any variable the request leaves out.
    """
    pipeline = await get_owned_pipeline(db, current_user.id, pipeline_id)

    variables = await pipeline_repository.get_template_defaults(db, pipeline.id)
    variables.update(payload.variables)

    run = await run_repository.create_run(
        db,
        pipeline_id=pipeline.id,
        user_id=current_user.id,
        input_text=payload.input,
        variables=variables,
    )
    run_id = str(run.id)
    # The worker must be able to see the row
    await db.commit()

    log = logger.bind(run_id=run_id, pipeline_id=str(pipeline.id), user_id=current_user.id)
    try:
        task_id = pipeline_tasks.enqueue_pipeline_run(run_id)
    except Exception as exc:
        log.exception("Failed to queue pipeline run")
        await run_repository.fail_run(db, run.id, "Could not queue pipeline run")
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not queue pipeline run",
        ) from exc

    log.info("Pipeline run created", task_id=task_id)
    return {"success": True, "run_id": run_id}


@router.get("/pipelines/{pipeline_id}/runs")
async def list_runs(
    pipeline_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, list[RunResponse]]:
    pipeline = await get_owned_pipeline(db, current_user.id, pipeline_id)
    runs = await run_repository.list_runs(
        db, current_user.id, pipeline.id, limit=limit, offset=offset
    )
    return {"runs": [RunResponse.model_validate(r) for r in runs]}


# ─── Detail ───────────────────────────────────────────────
@router.get("/runs/{run_id}")
async def get_run(
    run_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, RunDetailResponse]:
    run_uuid = parse_uuid(run_id)
    run = (
        await run_repository.get_run(db, run_uuid, user_id=current_user.id, with_steps=True)
        if run_uuid is not None
        else None
    )
    if run is None:
        raise not_found("Run")
    return {"run": RunDetailResponse.model_validate(run)}


# ─── Stream ───────────────────────────────────────────────
async def _run_events(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession],
    run_id: uuid.UUID,
    initial_status: str,
    after_seq: int,
) -> AsyncIterator[str]:
    """
    Yield SSE frames until the run is terminal and its log is drained.

    The run status is read before the events in each poll. The worker
    writes the final event in the same transaction that makes the run
    terminal, so a terminal status means every event is already visible.
    """
    if initial_status != RunStatus.PENDING:
        yield format_sse({"type": RunEventType.STATUS.value, "status": initial_status})

    cursor = after_seq
    idle_polls = 0
    page_size = 200

    while True:
        if await request.is_disconnected():
            logger.debug("Run stream client disconnected", run_id=str(run_id))
            break

        async with session_factory() as db:
            run_status = await run_repository.get_run_status(db, run_id)
            events = await list_events(db, run_id, after_seq=cursor, limit=page_size)

        for event in events:
            cursor = event.seq
            yield format_sse(event_message(event), event.seq)

        if run_status is None:
            break
        if run_status in TERMINAL_RUN_STATUSES and len(events) < page_size:
            break

        if events:
            idle_polls = 0
            continue
        idle_polls += 1
        if idle_polls % KEEPALIVE_EVERY == 0:
            yield ": keepalive\n\n"
        await asyncio.sleep(settings.RUN_STREAM_POLL_INTERVAL)


@router.get("/runs/{run_id}/stream")
async def stream_run(
    run_id: str,
    request: Request,
    after_seq: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> StreamingResponse:
    """
    Server-Sent Events for a run's progress.

    Every frame is ``event: update`` with a JSON ``data`` object whose
    ``type`` is one of status, step_start, step_complete,
    pipeline_complete or error. Pass ``?after_seq=N`` to resume.
    """
    run_uuid = parse_uuid(run_id)
    run = (
        await run_repository.get_run(db, run_uuid, user_id=current_user.id)
        if run_uuid is not None
        else None
    )
    if run is None:
        raise not_found("Run")
    initial_status = run.status
    # Release the connection; the stream opens short sessions of its own
    await db.close()

    return StreamingResponse(
        _run_events(request, session_factory, run_uuid, initial_status, after_seq),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )

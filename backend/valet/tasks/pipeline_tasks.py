"""
Celery tasks: pipeline runs.

The API creates a ``pending`` PipelineRun and calls
``enqueue_pipeline_run``; the worker picks it up and drives it through
PipelineEngine (``running`` then ``completed``/``failed``).
"""

from __future__ import annotations

import asyncio

import structlog
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from valet.core.config import settings
from valet.pipeline.engine import PipelineEngine, PipelineResult
from valet.tasks import celery_app

logger = structlog.get_logger("tasks.pipeline")


async def _run_pipeline(run_id: str) -> PipelineResult:
    """Run with a fresh engine; Celery gives every task a new event loop."""
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        return await PipelineEngine(factory).run(run_id)
    finally:
        await engine.dispose()


@celery_app.task(
    bind=True,
    name="valet.tasks.pipeline_tasks.execute_pipeline_run",
    max_retries=2,
    default_retry_delay=5,
)
def execute_pipeline_run(self, run_id: str) -> dict[str, object]:
    """
    Execute one pipeline run.

    Only database connectivity errors are retried; provider and flow
    errors are recorded on the run by the engine and do not raise.
    Retries are safe because the engine skips runs that already finished.
    """
    task_log = logger.bind(task_id=self.request.id, run_id=run_id)
    task_log.info("Pipeline task started")

    try:
        result = asyncio.run(_run_pipeline(run_id))
    except OperationalError as exc:
        task_log.warning("Database unavailable, retrying", error=str(exc))
        raise self.retry(exc=exc)

    task_log.info(
        "Pipeline task finished",
        status=result.status,
        steps_completed=result.steps_completed,
        total_steps=result.total_steps,
    )
    return {
        "run_id": result.run_id,
        "status": result.status,
        "steps_completed": result.steps_completed,
        "total_steps": result.total_steps,
        "error": result.error,
    }


def enqueue_pipeline_run(run_id: str) -> str:
    """Queue a run for the worker and return the Celery task id."""
    task = execute_pipeline_run.delay(run_id)
    logger.info("Pipeline run queued", run_id=run_id, task_id=task.id)
    return task.id

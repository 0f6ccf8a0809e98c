"""
Pipeline run repository: run rows and their per-agent steps.

API-side functions take the owning ``user_id``; the worker-side
functions operate by run id only.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from valet.core.constants import RunStatus, StepStatus
from valet.db.models.base import utcnow
from valet.db.models.pipeline_run import PipelineRun
from valet.db.models.pipeline_run_step import PipelineRunStep


async def create_run(
    db: AsyncSession,
    *,
    pipeline_id: uuid.UUID,
    user_id: int,
    input_text: str,
    variables: dict[str, Any],
) -> PipelineRun:
    run = PipelineRun(
        pipeline_id=pipeline_id,
        user_id=user_id,
        status=RunStatus.PENDING.value,
        input=input_text,
        variables=variables,
    )
    db.add(run)
    await db.flush()
    return run


async def list_runs(
    db: AsyncSession,
    user_id: int,
    pipeline_id: uuid.UUID,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[PipelineRun]:
    """Run history of a pipeline, newest first."""
    stmt = (
        select(PipelineRun)
        .where(PipelineRun.pipeline_id == pipeline_id, PipelineRun.user_id == user_id)
        .order_by(PipelineRun.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_run(
    db: AsyncSession,
    run_id: uuid.UUID,
    *,
    user_id: int | None = None,
    with_steps: bool = False,
) -> PipelineRun | None:
    stmt = select(PipelineRun).where(PipelineRun.id == run_id)
    if user_id is not None:
        stmt = stmt.where(PipelineRun.user_id == user_id)
    if with_steps:
        stmt = stmt.options(selectinload(PipelineRun.steps))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_run_status(db: AsyncSession, run_id: uuid.UUID) -> str | None:
    result = await db.execute(select(PipelineRun.status).where(PipelineRun.id == run_id))
    return result.scalar_one_or_none()


# ─── Worker-side state transitions ────────────────────────
async def mark_run_running(db: AsyncSession, run_id: uuid.UUID) -> None:
    await db.execute(
        update(PipelineRun)
        .where(PipelineRun.id == run_id)
        .values(status=RunStatus.RUNNING.value, started_at=utcnow())
    )
    await db.flush()


async def set_run_model(db: AsyncSession, run_id: uuid.UUID, model: str) -> None:
    await db.execute(update(PipelineRun).where(PipelineRun.id == run_id).values(model=model))
    await db.flush()


async def complete_run(
    db: AsyncSession,
    run_id: uuid.UUID,
    *,
    final_output: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> None:
    await db.execute(
        update(PipelineRun)
        .where(PipelineRun.id == run_id)
        .values(
            status=RunStatus.COMPLETED.value,
            final_output=final_output,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            completed_at=utcnow(),
        )
    )
    await db.flush()


async def fail_run(db: AsyncSession, run_id: uuid.UUID, error: str) -> None:
    await db.execute(
        update(PipelineRun)
        .where(PipelineRun.id == run_id)
        .values(status=RunStatus.FAILED.value, error=error, completed_at=utcnow())
    )
    await db.flush()


async def create_steps(
    db: AsyncSession,
    run_id: uuid.UUID,
    agents: list[tuple[uuid.UUID, str]],
) -> list[PipelineRunStep]:
    """One pending step per ``(agent_id, agent_name)``, in execution order."""
    steps = [
        PipelineRunStep(
            run_id=run_id,
            agent_id=agent_id,
            agent_name=agent_name,
            step_order=order,
            status=StepStatus.PENDING.value,
        )
        for order, (agent_id, agent_name) in enumerate(agents)
    ]
    db.add_all(steps)
    await db.flush()
    return steps


async def start_step(db: AsyncSession, step_id: uuid.UUID, input_text: str) -> None:
    await db.execute(
        update(PipelineRunStep)
        .where(PipelineRunStep.id == step_id)
        .values(status=StepStatus.RUNNING.value, input=input_text, started_at=utcnow())
    )
    await db.flush()


async def complete_step(db: AsyncSession, step_id: uuid.UUID, output: str) -> None:
    await db.execute(
        update(PipelineRunStep)
        .where(PipelineRunStep.id == step_id)
        .values(status=StepStatus.COMPLETED.value, output=output, completed_at=utcnow())
    )
    await db.flush()


async def fail_step(db: AsyncSession, step_id: uuid.UUID, error: str) -> None:
    await db.execute(
        update(PipelineRunStep)
        .where(PipelineRunStep.id == step_id)
        .values(status=StepStatus.FAILED.value, error=error, completed_at=utcnow())
    )
    await db.flush()

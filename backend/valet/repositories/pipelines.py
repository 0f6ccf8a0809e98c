"""
Pipeline repository, including the per-pipeline variable template.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from valet.db.models.base import utcnow
from valet.db.models.pipeline import Pipeline, empty_flow
from valet.db.models.pipeline_template import PipelineTemplate


async def list_pipelines(db: AsyncSession, user_id: int) -> list[Pipeline]:
    """User's pipelines, most recently updated first."""
    stmt = (
        select(Pipeline)
        .where(Pipeline.user_id == user_id)
        .order_by(Pipeline.updated_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_pipeline(db: AsyncSession, user_id: int, pipeline_id: uuid.UUID) -> Pipeline | None:
    stmt = select(Pipeline).where(Pipeline.id == pipeline_id, Pipeline.user_id == user_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_owned_ids(
    db: AsyncSession, user_id: int, pipeline_ids: list[uuid.UUID]
) -> set[uuid.UUID]:
    if not pipeline_ids:
        return set()
    stmt = select(Pipeline.id).where(
        Pipeline.user_id == user_id, Pipeline.id.in_(set(pipeline_ids))
    )
    result = await db.execute(stmt)
    return set(result.scalars().all())


async def create_pipeline(
    db: AsyncSession,
    *,
    user_id: int,
    name: str,
    description: str | None = None,
    flow_data: dict[str, Any] | None = None,
) -> Pipeline:
    pipeline = Pipeline(
        user_id=user_id,
        name=name,
        description=description,
        flow_data=flow_data if flow_data is not None else empty_flow(),
    )
    db.add(pipeline)
    await db.flush()
    return pipeline


async def update_pipeline(
    db: AsyncSession,
    user_id: int,
    pipeline_id: uuid.UUID,
    **fields: Any,
) -> Pipeline | None:
    """Update name/description/flow_data; None values are left as-is."""
    pipeline = await get_pipeline(db, user_id, pipeline_id)
    if pipeline is None:
        return None

    allowed = {"name", "description", "flow_data"}
    for key, value in fields.items():
        if key not in allowed or value is None:
            continue
        setattr(pipeline, key, value)

    pipeline.updated_at = utcnow()
    await db.flush()
    return pipeline


async def delete_pipeline(db: AsyncSession, user_id: int, pipeline_id: uuid.UUID) -> bool:
    """Hard-delete a pipeline; tabs, template and runs cascade."""
    result = await db.execute(
        delete(Pipeline).where(Pipeline.id == pipeline_id, Pipeline.user_id == user_id)
    )
    await db.flush()
    return result.rowcount > 0


# ─── Template ─────────────────────────────────────────────
async def get_template(db: AsyncSession, pipeline_id: uuid.UUID) -> PipelineTemplate | None:
    stmt = select(PipelineTemplate).where(PipelineTemplate.pipeline_id == pipeline_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_template(
    db: AsyncSession,
    pipeline_id: uuid.UUID,
    variables: list[dict[str, Any]],
) -> PipelineTemplate:
    template = await get_template(db, pipeline_id)
    if template is None:
        template = PipelineTemplate(pipeline_id=pipeline_id, variables=variables)
        db.add(template)
    else:
        template.variables = variables
        template.updated_at = utcnow()
    await db.flush()
    return template


async def get_template_defaults(db: AsyncSession, pipeline_id: uuid.UUID) -> dict[str, str]:
    """``{name: default_value}`` for template variables that have a default."""
    template = await get_template(db, pipeline_id)
    if template is None:
        return {}
    return {
        var["name"]: var["default_value"]
        for var in template.variables
        if var.get("name") and var.get("default_value") is not None
    }

"""Pipeline CRUD and template endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import get_current_user, get_db, not_found, parse_uuid
from valet.api.schemas.pipelines import (
    PipelineCreateRequest,
    PipelineResponse,
    PipelineSummary,
    PipelineUpdateRequest,
    TemplateRequest,
)
from valet.core.logging import get_logger
from valet.db.models.pipeline import Pipeline
from valet.db.models.user import User
from valet.repositories import pipelines as pipeline_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/pipelines", tags=["Pipelines"])


async def get_owned_pipeline(db: AsyncSession, user_id: int, pipeline_id: str) -> Pipeline:
    """Load a pipeline of the user or raise 404."""
    pipeline_uuid = parse_uuid(pipeline_id)
    pipeline = (
        await pipeline_repository.get_pipeline(db, user_id, pipeline_uuid)
        if pipeline_uuid is not None
        else None
    )
    if pipeline is None:
        raise not_found("Pipeline")
    return pipeline


@router.get("")
async def list_pipelines(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, list[PipelineSummary]]:
    pipelines = await pipeline_repository.list_pipelines(db, current_user.id)
    return {"pipelines": [PipelineSummary.model_validate(p) for p in pipelines]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_pipeline(
    payload: PipelineCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    pipeline = await pipeline_repository.create_pipeline(
        db,
        user_id=current_user.id,
        name=payload.name.strip(),
        description=payload.description,
        flow_data=payload.flow_data,
    )
    logger.info("Pipeline created", pipeline_id=str(pipeline.id), user_id=current_user.id)
    return {"success": True, "pipeline": PipelineResponse.model_validate(pipeline)}


@router.get("/{pipeline_id}")
async def get_pipeline(
    pipeline_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, PipelineResponse]:
    pipeline = await get_owned_pipeline(db, current_user.id, pipeline_id)
    return {"pipeline": PipelineResponse.model_validate(pipeline)}


@router.put("/{pipeline_id}")
async def update_pipeline(
    pipeline_id: str,
    payload: PipelineUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    pipeline = await get_owned_pipeline(db, current_user.id, pipeline_id)
    pipeline = await pipeline_repository.update_pipeline(
        db,
        current_user.id,
        pipeline.id,
        name=payload.name.strip() if payload.name else None,
        description=payload.description,
        flow_data=payload.flow_data,
    )
    return {"success": True, "pipeline": PipelineResponse.model_validate(pipeline)}


@router.delete("/{pipeline_id}")
async def delete_pipeline(
    pipeline_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, bool]:
    pipeline_uuid = parse_uuid(pipeline_id)
    if pipeline_uuid is None or not await pipeline_repository.delete_pipeline(
        db, current_user.id, pipeline_uuid
    ):
        raise not_found("Pipeline")
    logger.info("Pipeline deleted", pipeline_id=pipeline_id, user_id=current_user.id)
    return {"success": True}


# ─── Template ─────────────────────────────────────────────
@router.get("/{pipeline_id}/template")
async def get_template(
    pipeline_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    pipeline = await get_owned_pipeline(db, current_user.id, pipeline_id)
    template = await pipeline_repository.get_template(db, pipeline.id)
    return {
        "pipeline_id": pipeline.id,
        "variables": template.variables if template is not None else [],
    }


@router.put("/{pipeline_id}/template")
async def save_template(
    pipeline_id: str,
    payload: TemplateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    pipeline = await get_owned_pipeline(db, current_user.id, pipeline_id)
    variables = [v.model_dump() for v in payload.variables]
    template = await pipeline_repository.upsert_template(db, pipeline.id, variables)
    return {"success": True, "pipeline_id": pipeline.id, "variables": template.variables}


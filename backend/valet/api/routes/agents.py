"""Agent CRUD endpoints."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import bad_request, get_current_user, get_db, not_found, parse_uuid
from valet.api.schemas.agents import AgentRequest, AgentResponse, TraitOption
from valet.core.logging import get_logger
from valet.db.models.agent import Agent
from valet.db.models.user import User
from valet.repositories import agents as agent_repository
from valet.repositories import api_keys as api_key_repository
from valet.repositories import traits as trait_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/agents", tags=["Agents"])


def _agent_response(agent: Agent, trait_ids: list[uuid.UUID]) -> AgentResponse:
    return AgentResponse(
        id=agent.id,
        name=agent.name,
        instructions=agent.instructions,
        model=agent.model,
        trait_ids=trait_ids,
        created_at=agent.created_at,
        updated_at=agent.updated_at,
    )


async def _check_trait_ids(db: AsyncSession, user_id: int, trait_ids: list[uuid.UUID] | None) -> None:
    if not trait_ids:
        return
    owned = await trait_repository.get_owned_ids(db, user_id, trait_ids)
    if owned != set(trait_ids):
        raise bad_request("One or more traits were not found")


@router.get("")
async def list_agents(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Agents (newest first) plus what the agent form needs."""
    agents = await agent_repository.list_agents(db, current_user.id)
    trait_map = await agent_repository.get_trait_ids_by_agent(db, [a.id for a in agents])
    traits = await trait_repository.list_traits(db, current_user.id)
    keys = await api_key_repository.list_keys(db, current_user.id)

    return {
        "agents": [_agent_response(a, trait_map.get(a.id, [])) for a in agents],
        "traits": [TraitOption(id=t.id, name=t.name) for t in traits],
        "configured_providers": [k.provider for k in keys],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_agent(
    payload: AgentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    trait_ids = payload.trait_ids or []
    await _check_trait_ids(db, current_user.id, trait_ids)

    agent = await agent_repository.create_agent(
        db,
        user_id=current_user.id,
        name=payload.name,
        instructions=payload.instructions,
        model=payload.model,
        trait_ids=trait_ids,
    )
    logger.info("Agent created", agent_id=str(agent.id), user_id=current_user.id)
    return {"success": True, "agent": _agent_response(agent, list(dict.fromkeys(trait_ids)))}


@router.put("/{agent_id}")
async def update_agent(
    agent_id: str,
    payload: AgentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    agent_uuid = parse_uuid(agent_id)
    if agent_uuid is None or await agent_repository.get_agent(db, current_user.id, agent_uuid) is None:
        raise not_found("Agent")
    await _check_trait_ids(db, current_user.id, payload.trait_ids)

    agent = await agent_repository.update_agent(
        db,
        current_user.id,
        agent_uuid,
        name=payload.name,
        instructions=payload.instructions,
        model=payload.model,
        trait_ids=payload.trait_ids,
    )
    if agent is None:
        raise not_found("Agent")

    trait_map = await agent_repository.get_trait_ids_by_agent(db, [agent.id])
    return {"success": True, "agent": _agent_response(agent, trait_map.get(agent.id, []))}


@router.delete("/{agent_id}")
async def delete_agent(
    agent_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, bool]:
    agent_uuid = parse_uuid(agent_id)
    if agent_uuid is None or not await agent_repository.delete_agent(db, current_user.id, agent_uuid):
        raise not_found("Agent")
    logger.info("Agent deleted", agent_id=agent_id, user_id=current_user.id)
    return {"success": True}

"""
Agent repository, including trait assignments.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from valet.db.models.agent import Agent
from valet.db.models.agent_trait import AgentTrait
from valet.db.models.base import utcnow
from valet.db.models.trait import Trait


async def list_agents(db: AsyncSession, user_id: int) -> list[Agent]:
    """User's agents, newest first."""
    stmt = select(Agent).where(Agent.user_id == user_id).order_by(Agent.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_agent(db: AsyncSession, user_id: int, agent_id: uuid.UUID) -> Agent | None:
    stmt = select(Agent).where(Agent.id == agent_id, Agent.user_id == user_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_agents_by_ids(
    db: AsyncSession, user_id: int, agent_ids: Iterable[uuid.UUID]
) -> dict[uuid.UUID, Agent]:
    """Owned agents among *agent_ids*, keyed by id."""
    ids = set(agent_ids)
    if not ids:
        return {}
    stmt = select(Agent).where(Agent.user_id == user_id, Agent.id.in_(ids))
    result = await db.execute(stmt)
    return {agent.id: agent for agent in result.scalars().all()}


async def get_trait_ids_by_agent(
    db: AsyncSession, agent_ids: Iterable[uuid.UUID]
) -> dict[uuid.UUID, list[uuid.UUID]]:
    """Assigned trait ids per agent in one query."""
    ids = set(agent_ids)
    mapping: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    if not ids:
        return mapping
    stmt = (
        select(AgentTrait.agent_id, AgentTrait.trait_id)
        .where(AgentTrait.agent_id.in_(ids))
        .order_by(AgentTrait.assigned_at)
    )
    for agent_id, trait_id in (await db.execute(stmt)).all():
        mapping[agent_id].append(trait_id)
    return mapping


async def get_agent_traits(db: AsyncSession, agent_id: uuid.UUID) -> list[Trait]:
    """Traits assigned to an agent, ordered by name."""
    stmt = (
        select(Trait)
        .join(AgentTrait, AgentTrait.trait_id == Trait.id)
        .where(AgentTrait.agent_id == agent_id)
        .order_by(Trait.name, Trait.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def set_agent_traits(
    db: AsyncSession, agent_id: uuid.UUID, trait_ids: Iterable[uuid.UUID]
) -> None:
    """Replace the agent's trait assignments (delete-all + insert)."""
    await db.execute(delete(AgentTrait).where(AgentTrait.agent_id == agent_id))
    rows = [
        {"agent_id": agent_id, "trait_id": trait_id, "assigned_at": utcnow()}
        for trait_id in dict.fromkeys(trait_ids)
    ]
    if rows:
        await db.execute(insert(AgentTrait), rows)
    await db.flush()


async def create_agent(
    db: AsyncSession,
    *,
    user_id: int,
    name: str,
    instructions: str,
    model: str | None,
    trait_ids: Iterable[uuid.UUID] = (),
) -> Agent:
    agent = Agent(user_id=user_id, name=name, instructions=instructions, model=model)
    db.add(agent)
    await db.flush()
    await set_agent_traits(db, agent.id, trait_ids)
    return agent


async def update_agent(
    db: AsyncSession,
    user_id: int,
    agent_id: uuid.UUID,
    *,
    name: str,
    instructions: str,
    model: str | None,
    trait_ids: Iterable[uuid.UUID] | None = None,
) -> Agent | None:
    """
    Overwrite an agent's fields.

    ``trait_ids=None`` leaves assignments untouched; a list replaces them.
    Returns None when the agent is not owned by the user.
    """
    agent = await get_agent(db, user_id, agent_id)
    if agent is None:
        return None
    agent.name = name
    agent.instructions = instructions
    agent.model = model
    agent.updated_at = utcnow()
    await db.flush()
    if trait_ids is not None:
        await set_agent_traits(db, agent.id, trait_ids)
    return agent


async def delete_agent(db: AsyncSession, user_id: int, agent_id: uuid.UUID) -> bool:
    result = await db.execute(
        delete(Agent).where(Agent.id == agent_id, Agent.user_id == user_id)
    )
    await db.flush()
    return result.rowcount > 0

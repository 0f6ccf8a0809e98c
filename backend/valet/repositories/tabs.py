"""
Pipeline tab repository.

A user's tab set is always replaced wholesale: delete every row, insert
the submitted list, then read back through the pipelines join so the
names come from the database rather than the client.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from valet.db.models.base import utcnow
from valet.db.models.pipeline import Pipeline
from valet.db.models.pipeline_tab import PipelineTab


@dataclass
class TabRow:
    """A tab joined with its pipeline's current name."""

    pipeline_id: uuid.UUID
    name: str
    pinned: bool
    position: int
    is_active: bool


@dataclass
class TabInput:
    pipeline_id: uuid.UUID
    pinned: bool = False


async def list_tabs(db: AsyncSession, user_id: int) -> list[TabRow]:
    """User's tabs in position order, names from the pipelines table."""
    stmt = (
        select(
            PipelineTab.pipeline_id,
            Pipeline.name,
            PipelineTab.pinned,
            PipelineTab.position,
            PipelineTab.is_active,
        )
        .join(Pipeline, Pipeline.id == PipelineTab.pipeline_id)
        .where(PipelineTab.user_id == user_id)
        .order_by(PipelineTab.position)
    )
    result = await db.execute(stmt)
    return [TabRow(*row) for row in result.all()]


async def replace_tabs(
    db: AsyncSession,
    user_id: int,
    tabs: list[TabInput],
    active_tab_id: uuid.UUID | None,
) -> list[TabRow]:
    """
    Replace the user's tab set and return it re-read via the join.

    ``position`` is the list index and only the tab whose pipeline id
    equals *active_tab_id* is marked active. Runs inside the caller's
    transaction, so a failure leaves the previous set untouched.
    """
    await db.execute(delete(PipelineTab).where(PipelineTab.user_id == user_id))

    now = utcnow()
    rows = [
        {
            "id": uuid.uuid4(),
            "user_id": user_id,
            "pipeline_id": tab.pipeline_id,
            "pinned": tab.pinned,
            "position": index,
            "is_active": tab.pipeline_id == active_tab_id,
            "created_at": now,
        }
        for index, tab in enumerate(tabs)
    ]
    if rows:
        await db.execute(insert(PipelineTab), rows)
    await db.flush()

    return await list_tabs(db, user_id)

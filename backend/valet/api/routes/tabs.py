"""Open-tab sync: the editor's tab strip persisted per user."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import bad_request, get_current_user, get_db, parse_uuid
from valet.api.schemas.tabs import TabItem, TabResponse, TabsSaveRequest
from valet.core.config import settings
from valet.core.constants import HOME_TAB_ID
from valet.core.logging import get_logger
from valet.db.models.user import User
from valet.repositories import pipelines as pipeline_repository
from valet.repositories import tabs as tab_repository
from valet.repositories.tabs import TabInput, TabRow

logger = get_logger(__name__)

router = APIRouter(prefix="/tabs", tags=["Tabs"])


def _tabs_payload(rows: list[TabRow]) -> dict[str, Any]:
    active = next((row.pipeline_id for row in rows if row.is_active), None)
    return {
        "tabs": [
            TabResponse(
                pipeline_id=str(row.pipeline_id),
                name=row.name,
                pinned=row.pinned,
                position=row.position,
            )
            for row in rows
        ],
        "active_tab_id": str(active) if active is not None else None,
    }


def _parse_tabs(items: list[TabItem]) -> list[TabInput]:
    """Drop the home tab and duplicates; any other non-UUID id is a 400."""
    tabs: dict[uuid.UUID, TabInput] = {}
    for item in items:
        if item.pipeline_id == HOME_TAB_ID:
            continue
        pipeline_id = parse_uuid(item.pipeline_id)
        if pipeline_id is None:
            raise bad_request(f"Invalid pipeline id: {item.pipeline_id}")
        tabs.setdefault(pipeline_id, TabInput(pipeline_id=pipeline_id, pinned=item.pinned))
    if len(tabs) > settings.MAX_OPEN_TABS:
        raise bad_request(f"At most {settings.MAX_OPEN_TABS} tabs can be open")
    return list(tabs.values())


@router.get("")
async def get_tabs(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    rows = await tab_repository.list_tabs(db, current_user.id)
    return _tabs_payload(rows)


@router.post("")
async def save_tabs(
    payload: TabsSaveRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    Replace the user's tab set with the submitted one.

    Tabs pointing at pipelines the user does not own (deleted in another
    window, say) are dropped rather than rejected.
    """
    tabs = _parse_tabs(payload.tabs)
    owned = await pipeline_repository.get_owned_ids(db, current_user.id, [t.pipeline_id for t in tabs])
    tabs = [t for t in tabs if t.pipeline_id in owned]

    active_tab_id = parse_uuid(payload.active_tab_id) if payload.active_tab_id else None

    rows = await tab_repository.replace_tabs(db, current_user.id, tabs, active_tab_id)
    logger.debug("Tabs saved", user_id=current_user.id, count=len(rows))
    return {"success": True, **_tabs_payload(rows)}

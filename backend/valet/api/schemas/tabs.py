"""Tab sync schemas."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class TabItem(BaseModel):
    # str, not UUID: the client-only "home" tab travels here too
    pipeline_id: str
    pinned: bool = False


class TabsSaveRequest(BaseModel):
    tabs: list[TabItem]
    active_tab_id: str | None = None

    @field_validator("tabs", mode="before")
    @classmethod
    def tabs_array(cls, value: object) -> object:
        if not isinstance(value, list):
            raise ValueError("tabs must be an array")
        return value


class TabResponse(BaseModel):
    pipeline_id: str
    name: str
    pinned: bool
    position: int

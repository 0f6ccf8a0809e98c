"""Pipeline, template and run schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


def _check_flow(value: dict[str, Any] | None) -> dict[str, Any] | None:
    if value is None:
        return value
    for key in ("nodes", "edges"):
        if not isinstance(value.get(key, []), list):
            raise ValueError(f"flow_data.{key} must be an array")
    return value


FlowData = Annotated[dict[str, Any] | None, AfterValidator(_check_flow)]


class PipelineCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    flow_data: FlowData = None


class PipelineUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    flow_data: FlowData = None


class PipelineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    flow_data: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class PipelineSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    updated_at: datetime


# ─── Template ─────────────────────────────────────────────
class TemplateVariable(BaseModel):
    name: str = Field(..., pattern=r"^\w+$", max_length=100)
    description: str | None = None
    default_value: str | None = None


class TemplateRequest(BaseModel):
    variables: list[TemplateVariable] = []

    @field_validator("variables")
    @classmethod
    def unique_names(cls, value: list[TemplateVariable]) -> list[TemplateVariable]:
        names = [v.name for v in value]
        if len(names) != len(set(names)):
            raise ValueError("Template variable names must be unique")
        return value


# ─── Runs ─────────────────────────────────────────────────
class RunCreateRequest(BaseModel):
    input: str = ""
    variables: dict[str, str] = {}


class RunStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    agent_id: uuid.UUID | None
    agent_name: str
    step_order: int
    status: str
    input: str | None
    output: str | None
    error: str | None
    started_at: datetime | None
    completed_at: datetime | None


class RunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    pipeline_id: uuid.UUID
    status: str
    input: str
    variables: dict[str, Any]
    final_output: str | None
    error: str | None
    model: str | None
    input_tokens: int
    output_tokens: int
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None


class RunDetailResponse(RunResponse):
    steps: list[RunStepResponse] = []

"""API schema package."""

from valet.api.schemas.agents import AgentRequest, AgentResponse, RunAgentRequest, TraitOption
from valet.api.schemas.auth import CurrentUserResponse, LoginRequest, RegisterRequest
from valet.api.schemas.pipelines import (
    PipelineCreateRequest,
    PipelineResponse,
    PipelineSummary,
    PipelineUpdateRequest,
    RunCreateRequest,
    RunDetailResponse,
    RunResponse,
    TemplateRequest,
)
from valet.api.schemas.settings import ApiKeyRequest, ModelPreferenceRequest
from valet.api.schemas.tabs import TabResponse, TabsSaveRequest
from valet.api.schemas.traits import TraitRequest, TraitResponse

__all__ = [
    "AgentRequest",
    "AgentResponse",
    "RunAgentRequest",
    "TraitOption",
    "CurrentUserResponse",
    "LoginRequest",
    "RegisterRequest",
    "PipelineCreateRequest",
    "PipelineResponse",
    "PipelineSummary",
    "PipelineUpdateRequest",
    "RunCreateRequest",
    "RunDetailResponse",
    "RunResponse",
    "TemplateRequest",
    "ApiKeyRequest",
    "ModelPreferenceRequest",
    "TabResponse",
    "TabsSaveRequest",
    "TraitRequest",
    "TraitResponse",
]

"""Shared constants and enums used across the application."""

from enum import StrEnum


class ProviderId(StrEnum):
    """LLM providers a user can store credentials for."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class RunStatus(StrEnum):
    """Overall status of a pipeline run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(StrEnum):
    """Status of an individual agent step within a run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunEventType(StrEnum):
    """Events recorded while a pipeline run executes."""

    STATUS = "status"
    STEP_START = "step_start"
    STEP_COMPLETE = "step_complete"
    PIPELINE_COMPLETE = "pipeline_complete"
    ERROR = "error"


class ToolType(StrEnum):
    """Provider-side tools an agent may use."""

    WEB_SEARCH = "web_search"
    WEB_FETCH = "web_fetch"


TERMINAL_RUN_STATUSES = frozenset({RunStatus.COMPLETED, RunStatus.FAILED})

# Client-only tab that is never persisted.
HOME_TAB_ID = "home"

DEFAULT_TRAIT_COLOR = "#f59e0b"

# Sentinel the agent form sends for "use my default model".
DEFAULT_MODEL_SENTINEL = "__default__"

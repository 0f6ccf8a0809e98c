"""
Exception hierarchy for pipeline execution.

Everything derives from PipelineError, which carries the run id, the
index of the step being executed (if any) and free-form details for
logging.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        run_id: str | None = None,
        step_index: int | None = None,
        details: dict | None = None,
    ) -> None:
        self.run_id = run_id
        self.step_index = step_index
        self.details = details or {}
        super().__init__(message)


class FlowResolutionError(PipelineError):
    """The flow graph cannot be turned into an agent sequence."""
    pass


class OrphanedAgentError(PipelineError):
    """The flow references agents that no longer exist."""

    def __init__(self, agent_names: list[str], **kwargs) -> None:
        self.agent_names = agent_names
        super().__init__(
            f"Pipeline cannot run: {len(agent_names)} agent(s) have been deleted: "
            f"{', '.join(agent_names)}. Please update the pipeline.",
            **kwargs,
        )


class MissingApiKeyError(PipelineError):
    """The user has no key for the provider the pipeline needs."""

    def __init__(self, provider: str, **kwargs) -> None:
        self.provider = provider
        super().__init__(
            f"{provider} API key not configured. Please add your API key in Settings.",
            **kwargs,
        )


class StepExecutionError(PipelineError):
    """A provider call failed while executing a step."""
    pass

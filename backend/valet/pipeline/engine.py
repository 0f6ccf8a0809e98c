"""
PipelineEngine: runs a pipeline's agents one after another.

Responsibilities:
    - Resolve the agent order from the stored flow graph
    - Fail fast on deleted agents or a missing provider key
    - Pick one model for the whole run (first agent's model, then the
      user's preference, then the default)
    - Execute each step, feeding the previous output forward
    - Persist step/run state and append run events as it goes
    - Return a PipelineResult

Every state change is committed in its own short transaction so that
the SSE endpoint, polling from the API process, sees progress as it
happens.
"""

from __future__ import annotations

import re
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from valet.core.config import settings
from valet.core.constants import TERMINAL_RUN_STATUSES, RunEventType, RunStatus
from valet.llm.pricing import calculate_cost
from valet.llm.registry import get_provider, get_provider_for_model
from valet.llm.types import AIProvider, ChatMessage, ChatOptions, Usage
from valet.pipeline.errors import (
    FlowResolutionError,
    MissingApiKeyError,
    OrphanedAgentError,
    PipelineError,
    StepExecutionError,
)
from valet.pipeline.events import append_event
from valet.pipeline.flow import AgentNode, topological_order
from valet.repositories import agents as agent_repository
from valet.repositories import api_keys as api_key_repository
from valet.repositories import pipelines as pipeline_repository
from valet.repositories import runs as run_repository
from valet.services.agent_runner import build_system_prompt, build_trait_context, default_tools

VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")

NO_INPUT_PROMPT = "Please proceed with your instructions."


def substitute_variables(text: str, variables: dict[str, Any] | None) -> str:
    """Replace ``{{name}}`` placeholders; unknown names are left intact."""
    if not variables:
        return text

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in variables and variables[name] is not None:
            return str(variables[name])
        return match.group(0)

    return VARIABLE_PATTERN.sub(_replace, text)


def build_user_message(current_input: str, variables: dict[str, Any] | None) -> str:
    """
    What the agent is asked.

    The previous step's output when there is one; for a first step with
    no input, the variable values; otherwise a generic prompt.
    """
    if current_input.strip():
        return current_input
    if variables:
        lines = "\n".join(f"{key}: {value}" for key, value in variables.items())
        return (
            f"Here are your input values:\n\n{lines}\n\n"
            "Proceed with your task using these values. "
            "Do not ask for clarification - use the values provided above."
        )
    return NO_INPUT_PROMPT


@dataclass
class PlannedStep:
    """An agent resolved from the flow, ready to execute."""

    agent_id: uuid.UUID
    agent_name: str
    instructions: str
    model: str | None
    trait_context: str | None = None
    step_id: uuid.UUID | None = None


@dataclass
class PipelineResult:
    """Final outcome of a pipeline run."""

    run_id: str
    status: str                     # RunStatus value
    final_output: str | None = None
    error: str | None = None
    model: str | None = None
    steps_completed: int = 0
    total_steps: int = 0
    usage: Usage = field(default_factory=Usage)


class PipelineEngine:
    """
    Executes one PipelineRun end to end.

    Usage::

        engine = PipelineEngine(async_session)
        result = await engine.run(run_id)

    ``provider_factory`` builds an AIProvider from ``(provider_id,
    api_key)``; tests pass a fake.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        provider_factory: Callable[[str, str], AIProvider] = get_provider,
    ) -> None:
        self.session_factory = session_factory
        self.provider_factory = provider_factory
        self.logger = structlog.get_logger("pipeline.engine")

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def run(self, run_id: uuid.UUID | str) -> PipelineResult:
        run_uuid = uuid.UUID(str(run_id))
        log = self.logger.bind(run_id=str(run_uuid))

        async with self._transaction() as db:
            run = await run_repository.get_run(db, run_uuid)
            if run is None:
                log.error("Pipeline run not found")
                return PipelineResult(run_id=str(run_uuid), status=RunStatus.FAILED, error="Run not found")
            if run.status in TERMINAL_RUN_STATUSES:
                log.info("Pipeline run already finished, skipping", status=run.status)
                return PipelineResult(
                    run_id=str(run_uuid),
                    status=run.status,
                    final_output=run.final_output,
                    error=run.error,
                    model=run.model,
                )
            user_id = run.user_id
            pipeline_id = run.pipeline_id
            initial_input = run.input or ""
            variables = dict(run.variables or {})
            await run_repository.mark_run_running(db, run_uuid)
            await append_event(db, run_uuid, RunEventType.STATUS, {"status": RunStatus.RUNNING.value})

        log = log.bind(pipeline_id=str(pipeline_id), user_id=user_id)
        log.info("Pipeline started")

        steps: list[PlannedStep] = []
        current: PlannedStep | None = None
        current_index: int | None = None
        usage = Usage()
        model: str | None = None
        completed = 0

        try:
            steps, model, api_key = await self._prepare(run_uuid, user_id, pipeline_id)
            provider = self.provider_factory(get_provider_for_model(model), api_key)
            log = log.bind(model=model, total_steps=len(steps))

            current_input = initial_input
            for index, step in enumerate(steps):
                current, current_index = step, index
                step_log = log.bind(step_index=index, agent_name=step.agent_name)

                async with self._transaction() as db:
                    await run_repository.start_step(db, step.step_id, current_input)
                    await append_event(
                        db, run_uuid, RunEventType.STEP_START,
                        {"step_index": index, "agent_name": step.agent_name},
                    )
                step_log.info(f"Step {index + 1}/{len(steps)} started")

                instructions = substitute_variables(step.instructions, variables)
                messages = [
                    ChatMessage(role="system", content=build_system_prompt(instructions, step.trait_context)),
                    ChatMessage(role="user", content=build_user_message(current_input, variables)),
                ]
                try:
                    result = await provider.chat(messages, ChatOptions(model=model, tools=default_tools()))
                except Exception as exc:
                    raise StepExecutionError(
                        str(exc) or "Unknown error occurred",
                        run_id=str(run_uuid),
                        step_index=index,
                        details={"error_type": type(exc).__name__},
                    ) from exc

                usage = usage + result.usage
                async with self._transaction() as db:
                    await run_repository.complete_step(db, step.step_id, result.content)
                    await append_event(
                        db, run_uuid, RunEventType.STEP_COMPLETE,
                        {"step_index": index, "output": result.content},
                    )
                step_log.info(
                    "Step completed",
                    input_tokens=result.usage.input_tokens,
                    output_tokens=result.usage.output_tokens,
                )
                current_input = result.content
                current, current_index = None, None
                completed += 1

            cost = calculate_cost(model, usage.input_tokens, usage.output_tokens)
            async with self._transaction() as db:
                await run_repository.complete_run(
                    db,
                    run_uuid,
                    final_output=current_input,
                    model=model,
                    input_tokens=usage.input_tokens,
                    output_tokens=usage.output_tokens,
                )
                await append_event(
                    db, run_uuid, RunEventType.PIPELINE_COMPLETE,
                    {
                        "final_output": current_input,
                        "usage": usage.to_dict(),
                        "model": model,
                        "cost_usd": cost,
                    },
                )

        except Exception as exc:
            message = str(exc) or "Unknown error occurred"
            if isinstance(exc, PipelineError):
                log.error("Pipeline failed", error=message, error_type=type(exc).__name__, step_index=current_index)
            else:
                log.exception("Unexpected error in pipeline", error=message)

            async with self._transaction() as db:
                if current is not None and current.step_id is not None:
                    await run_repository.fail_step(db, current.step_id, message)
                await run_repository.fail_run(db, run_uuid, message)
                payload: dict[str, Any] = {"message": message}
                if current_index is not None:
                    payload["step_index"] = current_index
                await append_event(db, run_uuid, RunEventType.ERROR, payload)

            return PipelineResult(
                run_id=str(run_uuid),
                status=RunStatus.FAILED,
                error=message,
                model=model,
                steps_completed=completed,
                total_steps=len(steps),
                usage=usage,
            )

        log.info(
            "Pipeline finished",
            steps_completed=len(steps),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return PipelineResult(
            run_id=str(run_uuid),
            status=RunStatus.COMPLETED,
            final_output=current_input,
            model=model,
            steps_completed=len(steps),
            total_steps=len(steps),
            usage=usage,
        )

    async def _prepare(
        self,
        run_id: uuid.UUID,
        user_id: int,
        pipeline_id: uuid.UUID,
    ) -> tuple[list[PlannedStep], str, str]:
        """Resolve steps, model and key, and create the pending step rows."""
        async with self._transaction() as db:
            pipeline = await pipeline_repository.get_pipeline(db, user_id, pipeline_id)
            if pipeline is None:
                raise FlowResolutionError("Pipeline not found", run_id=str(run_id))

            nodes = topological_order(pipeline.flow_data)
            if not nodes:
                raise FlowResolutionError("Pipeline has no agents to run", run_id=str(run_id))

            steps = await self._plan_steps(db, user_id, nodes, run_id)

            model = steps[0].model or await api_key_repository.get_model_preference(db, user_id)
            model = model or settings.DEFAULT_MODEL
            provider_id = get_provider_for_model(model)
            api_key = await api_key_repository.get_decrypted_key(db, user_id, provider_id)
            if api_key is None:
                raise MissingApiKeyError(provider_id, run_id=str(run_id))

            rows = await run_repository.create_steps(
                db, run_id, [(s.agent_id, s.agent_name) for s in steps]
            )
            for step, row in zip(steps, rows):
                step.step_id = row.id
            await run_repository.set_run_model(db, run_id, model)

        return steps, model, api_key

    async def _plan_steps(
        self,
        db: AsyncSession,
        user_id: int,
        nodes: list[AgentNode],
        run_id: uuid.UUID,
    ) -> list[PlannedStep]:
        ids: dict[str, uuid.UUID | None] = {}
        for node in nodes:
            try:
                ids[node.node_id] = uuid.UUID(node.agent_id)
            except ValueError:
                ids[node.node_id] = None

        agents = await agent_repository.get_agents_by_ids(
            db, user_id, [i for i in ids.values() if i is not None]
        )

        orphaned = [n.display_name for n in nodes if agents.get(ids[n.node_id]) is None]
        if orphaned:
            raise OrphanedAgentError(orphaned, run_id=str(run_id))

        steps: list[PlannedStep] = []
        for node in nodes:
            agent = agents[ids[node.node_id]]
            traits = await agent_repository.get_agent_traits(db, agent.id)
            steps.append(
                PlannedStep(
                    agent_id=agent.id,
                    agent_name=agent.name,
                    instructions=agent.instructions,
                    model=agent.model,
                    trait_context=build_trait_context(traits),
                )
            )
        return steps

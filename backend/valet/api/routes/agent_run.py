"""
Agent run endpoint.

The checks run in a fixed order (auth, ownership, any key, body,
provider key) so that clients get the same error for the same
situation. The body is parsed by hand because those earlier checks
must win over body validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import get_current_user, get_db, not_found, parse_uuid
from valet.api.errors import error_response, format_validation_errors
from valet.api.schemas.agents import RunAgentRequest
from valet.core.config import settings
from valet.core.logging import get_logger
from valet.db.models.user import User
from valet.llm.errors import UnknownModelError
from valet.llm.registry import get_provider_for_model
from valet.repositories import agents as agent_repository
from valet.repositories import api_keys as api_key_repository
from valet.services.agent_runner import build_trait_context, run_agent

logger = get_logger(__name__)

router = APIRouter(prefix="/agent", tags=["Agents"])


@router.post("/{agent_id}/run")
async def run_agent_endpoint(
    agent_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Run an agent once against the user's input."""
    agent_uuid = parse_uuid(agent_id)
    agent = (
        await agent_repository.get_agent(db, current_user.id, agent_uuid)
        if agent_uuid is not None
        else None
    )
    if agent is None:
        raise not_found("Agent")

    keys = {k.provider: k for k in await api_key_repository.list_keys(db, current_user.id)}
    if not keys:
        return error_response("Please configure your API key in settings", status.HTTP_400_BAD_REQUEST)

    try:
        body = await request.json()
    except ValueError:
        return error_response("Invalid JSON body", status.HTTP_400_BAD_REQUEST)

    try:
        payload = RunAgentRequest.model_validate(body)
    except ValidationError as exc:
        message, _ = format_validation_errors(exc.errors())
        return error_response(message, status.HTTP_400_BAD_REQUEST)

    traits = await agent_repository.get_agent_traits(db, agent.id)
    trait_context = build_trait_context(traits)

    model = (
        agent.model
        or await api_key_repository.get_model_preference(db, current_user.id)
        or settings.DEFAULT_MODEL
    )
    try:
        provider_id = get_provider_for_model(model)
    except UnknownModelError as exc:
        return error_response(str(exc), status.HTTP_400_BAD_REQUEST)

    if provider_id not in keys:
        return error_response(
            f"Please configure your {provider_id} API key in settings",
            status.HTTP_400_BAD_REQUEST,
        )
    api_key = await api_key_repository.get_decrypted_key(db, current_user.id, provider_id)

    log = logger.bind(agent_id=str(agent.id), user_id=current_user.id, model=model)
    log.info("Running agent", traits=len(traits))

    result = await run_agent(
        instructions=agent.instructions,
        user_input=payload.input,
        api_key=api_key,
        model=model,
        trait_context=trait_context,
    )
    return JSONResponse(
        content=result.to_dict(),
        status_code=status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

"""POST /api/agent/{id}/run: the ordered checks and the provider call."""

import uuid

import pytest
from cryptography.fernet import Fernet

from valet.core.config import settings
from valet.repositories import agents as agent_repository
from valet.repositories import api_keys as api_key_repository
from valet.repositories import traits as trait_repository


@pytest.fixture
async def agent(session_factory, user):
    async with session_factory() as db:
        traits = [
            await trait_repository.create_trait(db, user_id=user.id, name=name, context=context)
            for name, context in [("Zen", "Stay calm."), ("Brief", "Be short.")]
        ]
        agent = await agent_repository.create_agent(
            db,
            user_id=user.id,
            name="Helper",
            instructions="Help the user.",
            model=None,
            trait_ids=[t.id for t in traits],
        )
        await db.commit()
    return agent


def run_url(agent_id):
    return f"/api/agent/{agent_id}/run"


async def test_requires_session(client, agent):
    response = await client.post(run_url(agent.id), json={"input": "hi"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Authentication required"}


async def test_unknown_agent(auth_client, anthropic_key):
    response = await auth_client.post(run_url(uuid.uuid4()), json={"input": "hi"})

    assert response.status_code == 404
    assert response.json()["error"] == "Agent not found"


async def test_other_users_agent_is_not_found(auth_client, session_factory, other_user, anthropic_key):
    async with session_factory() as db:
        foreign = await agent_repository.create_agent(
            db, user_id=other_user.id, name="Theirs", instructions="x", model=None
        )
        await db.commit()

    response = await auth_client.post(run_url(foreign.id), json={"input": "hi"})

    assert response.status_code == 404


async def test_no_api_key_checked_before_body(auth_client, agent):
    response = await auth_client.post(run_url(agent.id), content=b"not json")

    assert response.status_code == 400
    assert response.json()["error"] == "Please configure your API key in settings"


async def test_invalid_json(auth_client, agent, anthropic_key):
    response = await auth_client.post(
        run_url(agent.id), content=b"{oops", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON body"


@pytest.mark.parametrize("body", [{}, {"input": ""}])
async def test_empty_input(auth_client, agent, anthropic_key, providers, body):
    response = await auth_client.post(run_url(agent.id), json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Input is required"
    assert providers.calls == []


async def test_missing_provider_key(auth_client, agent, session_factory, user):
    async with session_factory() as db:
        await api_key_repository.upsert_key(db, user_id=user.id, provider="openai", api_key="sk-oa")
        await db.commit()

    response = await auth_client.post(run_url(agent.id), json={"input": "hi"})

    assert response.status_code == 400
    assert response.json()["error"] == "Please configure your anthropic API key in settings"


async def test_success(auth_client, agent, anthropic_key, providers):
    providers.replies = ["Here you go"]

    response = await auth_client.post(run_url(agent.id), json={"input": "What's new?"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["content"] == "Here you go"
    assert body["model"] == settings.DEFAULT_MODEL
    assert body["usage"] == {"input_tokens": 100, "output_tokens": 50}
    assert body["citations"] == [{"url": "https://example.com/source", "title": "Source"}]
    assert body["cost_usd"] == pytest.approx((100 * 3 + 50 * 15) / 1_000_000)

    ((messages, options),) = providers.calls
    assert messages[0].content == (
        "## Brief\n\nBe short.\n\n---\n\n## Zen\n\nStay calm.\n\n---\n\nHelp the user."
    )
    assert messages[1].content == "What's new?"
    assert sorted(t.type for t in options.tools) == ["web_fetch", "web_search"]
    assert all(t.max_uses == 5 for t in options.tools)
    assert providers.api_keys == [anthropic_key]


async def test_agent_model_overrides_preference(auth_client, session_factory, user, anthropic_key, providers):
    async with session_factory() as db:
        agent = await agent_repository.create_agent(
            db, user_id=user.id, name="Fast", instructions="x", model="claude-haiku-4-5-20251001"
        )
        await db.commit()

    response = await auth_client.post(run_url(agent.id), json={"input": "hi"})

    assert response.json()["model"] == "claude-haiku-4-5-20251001"
    assert providers.calls[0][0][0].content == "x"


async def test_provider_failure_is_500(auth_client, agent, anthropic_key, providers):
    providers.error = RuntimeError("upstream exploded")

    response = await auth_client.post(run_url(agent.id), json={"input": "hi"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "upstream exploded"}


async def test_undecryptable_key_returns_json_error(
    auth_client, agent, anthropic_key, providers, monkeypatch
):
    monkeypatch.setattr(settings, "ENCRYPTION_KEY", Fernet.generate_key().decode())

    response = await auth_client.post(run_url(agent.id), json={"input": "hi"})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"success": False, "error": "Internal server error"}
    assert providers.calls == []

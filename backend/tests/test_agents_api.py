import uuid

import pytest

from valet.repositories import agents as agent_repository


async def create_trait(client, name):
    response = await client.post("/api/traits", json={"name": name, "context": f"{name} context"})
    return response.json()["trait"]["id"]


async def create_agent(client, **overrides):
    payload = {"name": "Researcher", "instructions": "Find things out.", **overrides}
    response = await client.post("/api/agents", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["agent"]


async def test_create_with_traits(auth_client):
    trait_id = await create_trait(auth_client, "Formal")

    agent = await create_agent(auth_client, trait_ids=[trait_id])

    assert agent["trait_ids"] == [trait_id]
    assert agent["model"] is None


@pytest.mark.parametrize("model", ["", "__default__", None])
async def test_default_model_sentinels_store_null(auth_client, model):
    agent = await create_agent(auth_client, model=model)

    assert agent["model"] is None


async def test_unknown_model_is_rejected(auth_client):
    response = await auth_client.post(
        "/api/agents", json={"name": "A", "instructions": "B", "model": "gpt-2"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Unknown model: gpt-2"


async def test_blank_name_is_rejected(auth_client):
    response = await auth_client.post("/api/agents", json={"name": "   ", "instructions": "B"})

    assert response.status_code == 400
    assert "name" in response.json()["errors"]


async def test_foreign_trait_is_rejected(auth_client):
    response = await auth_client.post(
        "/api/agents",
        json={"name": "A", "instructions": "B", "trait_ids": [str(uuid.uuid4())]},
    )

    assert response.status_code == 400


async def test_list_includes_form_data(auth_client, anthropic_key):
    trait_id = await create_trait(auth_client, "Formal")
    await create_agent(auth_client, name="First", trait_ids=[trait_id])
    await create_agent(auth_client, name="Second", model="claude-haiku-4-5-20251001")

    body = (await auth_client.get("/api/agents")).json()

    assert [a["name"] for a in body["agents"]] == ["Second", "First"]
    assert body["agents"][1]["trait_ids"] == [trait_id]
    assert body["traits"] == [{"id": trait_id, "name": "Formal"}]
    assert body["configured_providers"] == ["anthropic"]


async def test_update_without_trait_ids_keeps_assignments(auth_client):
    trait_id = await create_trait(auth_client, "Formal")
    agent = await create_agent(auth_client, trait_ids=[trait_id])

    response = await auth_client.put(
        f"/api/agents/{agent['id']}", json={"name": "Renamed", "instructions": "New"}
    )

    assert response.status_code == 200
    assert response.json()["agent"]["name"] == "Renamed"
    assert response.json()["agent"]["trait_ids"] == [trait_id]


async def test_update_with_empty_list_clears_traits(auth_client):
    trait_id = await create_trait(auth_client, "Formal")
    agent = await create_agent(auth_client, trait_ids=[trait_id])

    response = await auth_client.put(
        f"/api/agents/{agent['id']}",
        json={"name": "A", "instructions": "B", "trait_ids": []},
    )

    assert response.json()["agent"]["trait_ids"] == []


async def test_delete(auth_client):
    agent = await create_agent(auth_client)

    assert (await auth_client.delete(f"/api/agents/{agent['id']}")).status_code == 200
    assert (await auth_client.delete(f"/api/agents/{agent['id']}")).status_code == 404


async def test_other_users_agents_are_invisible(auth_client, session_factory, other_user):
    async with session_factory() as db:
        foreign = await agent_repository.create_agent(
            db, user_id=other_user.id, name="Theirs", instructions="x", model=None
        )
        await db.commit()

    assert (await auth_client.get("/api/agents")).json()["agents"] == []
    response = await auth_client.put(
        f"/api/agents/{foreign.id}", json={"name": "Mine", "instructions": "x"}
    )
    assert response.status_code == 404


async def test_foreign_agent_is_not_found_before_traits_are_checked(
    auth_client, session_factory, other_user
):
    async with session_factory() as db:
        foreign = await agent_repository.create_agent(
            db, user_id=other_user.id, name="Theirs", instructions="x", model=None
        )
        await db.commit()

    response = await auth_client.put(
        f"/api/agents/{foreign.id}",
        json={"name": "Mine", "instructions": "x", "trait_ids": [str(uuid.uuid4())]},
    )

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Agent not found"}

import uuid


async def create_pipeline(client, **overrides):
    response = await client.post("/api/pipelines", json={"name": "Flow", **overrides})
    assert response.status_code == 201, response.text
    return response.json()["pipeline"]


async def test_create_defaults_to_empty_flow(auth_client):
    pipeline = await create_pipeline(auth_client, description="Does things")

    assert pipeline["flow_data"] == {"nodes": [], "edges": []}
    assert pipeline["description"] == "Does things"


async def test_flow_data_must_hold_arrays(auth_client):
    response = await auth_client.post(
        "/api/pipelines", json={"name": "Bad", "flow_data": {"nodes": {}, "edges": []}}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "flow_data.nodes must be an array"


async def test_list_most_recently_updated_first(auth_client):
    first = await create_pipeline(auth_client, name="First")
    await create_pipeline(auth_client, name="Second")
    await auth_client.put(f"/api/pipelines/{first['id']}", json={"description": "touched"})

    body = (await auth_client.get("/api/pipelines")).json()

    assert [p["name"] for p in body["pipelines"]] == ["First", "Second"]


async def test_update_keeps_omitted_fields(auth_client):
    flow = {"nodes": [{"id": "n1", "type": "agent", "data": {"agentId": "x"}}], "edges": []}
    pipeline = await create_pipeline(auth_client, flow_data=flow)

    response = await auth_client.put(f"/api/pipelines/{pipeline['id']}", json={"name": "Renamed"})

    assert response.status_code == 200
    updated = response.json()["pipeline"]
    assert updated["name"] == "Renamed"
    assert updated["flow_data"] == flow


async def test_get_and_delete(auth_client):
    pipeline = await create_pipeline(auth_client)

    got = await auth_client.get(f"/api/pipelines/{pipeline['id']}")
    assert got.json()["pipeline"]["id"] == pipeline["id"]

    assert (await auth_client.delete(f"/api/pipelines/{pipeline['id']}")).status_code == 200
    assert (await auth_client.get(f"/api/pipelines/{pipeline['id']}")).status_code == 404


async def test_missing_pipeline(auth_client):
    assert (await auth_client.get(f"/api/pipelines/{uuid.uuid4()}")).status_code == 404
    assert (await auth_client.get("/api/pipelines/nope")).status_code == 404


class TestTemplate:
    async def test_empty_by_default(self, auth_client):
        pipeline = await create_pipeline(auth_client)

        body = (await auth_client.get(f"/api/pipelines/{pipeline['id']}/template")).json()

        assert body["variables"] == []

    async def test_upsert(self, auth_client):
        pipeline = await create_pipeline(auth_client)
        url = f"/api/pipelines/{pipeline['id']}/template"

        await auth_client.put(url, json={"variables": [{"name": "topic"}]})
        response = await auth_client.put(
            url, json={"variables": [{"name": "topic", "default_value": "bees"}]}
        )

        assert response.status_code == 200
        body = (await auth_client.get(url)).json()
        assert body["variables"] == [{"name": "topic", "description": None, "default_value": "bees"}]

    async def test_duplicate_names_rejected(self, auth_client):
        pipeline = await create_pipeline(auth_client)

        response = await auth_client.put(
            f"/api/pipelines/{pipeline['id']}/template",
            json={"variables": [{"name": "a"}, {"name": "a"}]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Template variable names must be unique"

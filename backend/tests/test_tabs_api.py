"""Tab sync: full replace, positions, active tab, names from the join."""

import uuid

from valet.repositories import pipelines as pipeline_repository


async def make_pipelines(session_factory, user, *names):
    async with session_factory() as db:
        pipelines = [
            await pipeline_repository.create_pipeline(db, user_id=user.id, name=name)
            for name in names
        ]
        await db.commit()
    return [str(p.id) for p in pipelines]


async def test_empty_initially(auth_client):
    body = (await auth_client.get("/api/tabs")).json()

    assert body == {"tabs": [], "active_tab_id": None}


async def test_save_replaces_the_whole_set(auth_client, session_factory, user):
    a, b, c = await make_pipelines(session_factory, user, "Alpha", "Beta", "Gamma")

    await auth_client.post("/api/tabs", json={"tabs": [{"pipeline_id": a}, {"pipeline_id": b}]})
    response = await auth_client.post(
        "/api/tabs",
        json={
            "tabs": [
                {"pipeline_id": "home"},
                {"pipeline_id": c, "pinned": True},
                {"pipeline_id": a},
            ],
            "active_tab_id": a,
        },
    )

    assert response.status_code == 200
    expected = {
        "tabs": [
            {"pipeline_id": c, "name": "Gamma", "pinned": True, "position": 0},
            {"pipeline_id": a, "name": "Alpha", "pinned": False, "position": 1},
        ],
        "active_tab_id": a,
    }
    assert response.json() == {"success": True, **expected}
    assert (await auth_client.get("/api/tabs")).json() == expected


async def test_names_come_from_pipelines(auth_client, session_factory, user):
    (a,) = await make_pipelines(session_factory, user, "Current name")

    response = await auth_client.post(
        "/api/tabs", json={"tabs": [{"pipeline_id": a, "name": "Stale name"}]}
    )

    assert response.json()["tabs"][0]["name"] == "Current name"


async def test_home_active_means_no_active_row(auth_client, session_factory, user):
    (a,) = await make_pipelines(session_factory, user, "Alpha")

    response = await auth_client.post(
        "/api/tabs", json={"tabs": [{"pipeline_id": a}], "active_tab_id": "home"}
    )

    assert response.json()["active_tab_id"] is None


async def test_unowned_and_duplicate_tabs_are_dropped(auth_client, session_factory, user, other_user):
    (mine,) = await make_pipelines(session_factory, user, "Mine")
    (theirs,) = await make_pipelines(session_factory, other_user, "Theirs")

    response = await auth_client.post(
        "/api/tabs",
        json={
            "tabs": [
                {"pipeline_id": mine, "pinned": True},
                {"pipeline_id": theirs},
                {"pipeline_id": str(uuid.uuid4())},
                {"pipeline_id": mine},
            ]
        },
    )

    assert [t["pipeline_id"] for t in response.json()["tabs"]] == [mine]
    assert response.json()["tabs"][0]["pinned"] is True


async def test_tabs_must_be_an_array(auth_client):
    response = await auth_client.post("/api/tabs", json={"tabs": "nope"})

    assert response.status_code == 400
    assert response.json()["error"] == "tabs must be an array"


async def test_malformed_pipeline_id(auth_client):
    response = await auth_client.post("/api/tabs", json={"tabs": [{"pipeline_id": "abc"}]})

    assert response.status_code == 400


async def test_too_many_tabs(auth_client, session_factory, user):
    ids = await make_pipelines(session_factory, user, *[f"P{i}" for i in range(9)])

    response = await auth_client.post("/api/tabs", json={"tabs": [{"pipeline_id": i} for i in ids]})

    assert response.status_code == 400


async def test_deleting_a_pipeline_closes_its_tab(auth_client, session_factory, user):
    a, b = await make_pipelines(session_factory, user, "Alpha", "Beta")
    await auth_client.post("/api/tabs", json={"tabs": [{"pipeline_id": a}, {"pipeline_id": b}]})

    await auth_client.delete(f"/api/pipelines/{a}")

    tabs = (await auth_client.get("/api/tabs")).json()["tabs"]
    assert [t["pipeline_id"] for t in tabs] == [b]

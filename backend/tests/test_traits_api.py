import uuid


async def create_trait(client, **overrides):
    payload = {"name": "Formal", "context": "Write formally.", **overrides}
    response = await client.post("/api/traits", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["trait"]


async def test_create_applies_default_color(auth_client):
    trait = await create_trait(auth_client)

    assert trait["color"] == "#f59e0b"
    assert trait["name"] == "Formal"


async def test_list_is_sorted_by_name(auth_client):
    await create_trait(auth_client, name="Zesty")
    await create_trait(auth_client, name="Apt", color="oklch(0.7 0.1 200)")

    response = await auth_client.get("/api/traits")

    assert [t["name"] for t in response.json()["traits"]] == ["Apt", "Zesty"]


async def test_invalid_color_is_rejected(auth_client):
    response = await auth_client.post(
        "/api/traits", json={"name": "X", "context": "Y", "color": "red"}
    )

    assert response.status_code == 400
    assert "color" in response.json()["errors"]


async def test_update_and_delete(auth_client):
    trait = await create_trait(auth_client)

    updated = await auth_client.put(
        f"/api/traits/{trait['id']}",
        json={"name": "Casual", "context": "Relax.", "color": "#000000"},
    )
    assert updated.status_code == 200
    assert updated.json()["trait"]["color"] == "#000000"

    assert (await auth_client.delete(f"/api/traits/{trait['id']}")).status_code == 200
    assert (await auth_client.delete(f"/api/traits/{trait['id']}")).status_code == 404


async def test_unknown_or_malformed_id_is_404(auth_client):
    payload = {"name": "A", "context": "B"}
    assert (await auth_client.put(f"/api/traits/{uuid.uuid4()}", json=payload)).status_code == 404
    assert (await auth_client.put("/api/traits/not-a-uuid", json=payload)).status_code == 404

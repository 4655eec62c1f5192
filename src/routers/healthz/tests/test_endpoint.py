import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    """Health check answers without any store."""
    response = await client.get("/healthz/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"


@pytest.mark.asyncio
async def test_root_endpoint(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Welcome to the Invitations API"


@pytest.mark.asyncio
async def test_unknown_route_is_404(client):
    response = await client.get("/api/v1/nothing-here")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_ready_when_store_answers(client):
    response = await client.get("/healthz/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_not_ready_when_store_is_down(client, store):
    store.unavailable = True

    response = await client.get("/healthz/ready")

    assert response.status_code == 503

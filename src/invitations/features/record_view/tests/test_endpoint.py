from datetime import timedelta

import pytest

from src.invitations.repository.tests.inmemory_store import seed_invitation
from src.invitations.urls import RECORD_VIEW_URL


@pytest.mark.asyncio
async def test_record_view_twice(client, store, clock):
    invitation = seed_invitation(store, created_at=clock(), confirm_by=clock() + timedelta(hours=1))
    url = RECORD_VIEW_URL.format(invitation_id=invitation.id)

    first = await client.post(url, json={"device_id": "device-a"})
    second = await client.post(url, json={"device_id": "device-a"})

    assert first.status_code == 200
    assert first.json() == {"recorded": True}
    assert second.json() == {"recorded": False}


@pytest.mark.asyncio
async def test_record_view_unknown_invitation(client):
    response = await client.post(
        RECORD_VIEW_URL.format(invitation_id="f" * 32), json={"device_id": "device-a"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_view_requires_device_id(client, store, clock):
    invitation = seed_invitation(store, created_at=clock(), confirm_by=clock() + timedelta(hours=1))

    response = await client.post(RECORD_VIEW_URL.format(invitation_id=invitation.id), json={})

    assert response.status_code == 422

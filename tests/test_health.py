import pytest


@pytest.mark.anyio("asyncio")
async def test_healthcheck(client):
    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] in {"ok", "degraded"}
    assert payload.get("db_status") in {"ok", "error"}
    assert isinstance(payload.get("db_ok"), bool)
    assert payload["zero_amount_milestones_allowed"] is True

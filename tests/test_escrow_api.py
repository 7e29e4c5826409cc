from decimal import Decimal

import pytest


def _headers(address: str) -> dict[str, str]:
    return {"X-Caller-Address": address}


async def _create_registered_escrow(client, owner: str, developer: str, total: str = "100.00") -> dict:
    response = await client.post(
        "/registry/escrows",
        json={
            "project_name": "Community center",
            "project_description": "Two-storey timber frame building",
            "developer": developer,
            "total_capital": total,
            "deposited_amount": total,
        },
        headers=_headers(owner),
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.anyio("asyncio")
async def test_milestone_happy_path(client, owner, developer):
    escrow = await _create_registered_escrow(client, owner, developer)
    escrow_id = escrow["id"]
    assert escrow["owner"] == owner
    assert Decimal(escrow["uncommitted_capital"]) == Decimal("100")

    committed = await client.post(
        f"/escrows/{escrow_id}/milestones",
        json={"title": "A", "tentative_date": 1_893_456_000, "description": "Slab", "amount": "40.00"},
        headers=_headers(owner),
    )
    assert committed.status_code == 201
    assert committed.json()["index"] == 0
    assert committed.json()["status"] == "PENDING"

    rejected = await client.post(
        f"/escrows/{escrow_id}/milestones",
        json={"title": "B", "tentative_date": 1_893_456_000, "amount": "70.00"},
        headers=_headers(owner),
    )
    assert rejected.status_code == 409
    assert rejected.json()["error"]["code"] == "INSUFFICIENT_CAPITAL"

    fetched = await client.get(f"/escrows/{escrow_id}")
    assert Decimal(fetched.json()["uncommitted_capital"]) == Decimal("60")
    assert fetched.json()["milestone_count"] == 1

    count = await client.get(f"/escrows/{escrow_id}/milestones/count")
    assert count.json() == {"escrow_id": escrow_id, "count": 1}

    completed = await client.post(
        f"/escrows/{escrow_id}/milestones/0/complete",
        json={"proof": "ipfs://slab-photos"},
        headers=_headers(developer),
    )
    assert completed.status_code == 200
    assert completed.json()["completed"] is True

    approved = await client.post(f"/escrows/{escrow_id}/milestones/0/approve", headers=_headers(owner))
    assert approved.status_code == 200
    assert approved.json()["status"] == "PAID"
    assert approved.json()["paid"] is True
    assert Decimal(approved.json()["amount"]) == Decimal("0")
    assert Decimal(approved.json()["committed_amount"]) == Decimal("40")

    balance = await client.get(f"/accounts/{developer}/balance")
    assert Decimal(balance.json()["balance"]) == Decimal("40")

    again = await client.post(f"/escrows/{escrow_id}/milestones/0/approve", headers=_headers(owner))
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ALREADY_PAID"

    transfers = await client.get(f"/escrows/{escrow_id}/transfers")
    assert len(transfers.json()) == 1
    assert transfers.json()[0]["recipient"] == developer

    events = await client.get(f"/escrows/{escrow_id}/events")
    assert [e["kind"] for e in events.json()] == [
        "ProjectCreated",
        "MilestoneAdded",
        "MilestoneCompleted",
        "MilestoneApproved",
    ]


@pytest.mark.anyio("asyncio")
async def test_registry_endpoints(client, owner, stranger, developer):
    first = await _create_registered_escrow(client, owner, developer)
    second = await _create_registered_escrow(client, stranger, developer, "30.00")

    listed = await client.get("/registry/escrows")
    assert listed.status_code == 200
    assert [(e["id"], e["owner"]) for e in listed.json()] == [
        (first["id"], owner),
        (second["id"], stranger),
    ]

    count = await client.get("/registry/escrows/count")
    assert count.json() == {"count": 2}

    at_one = await client.get("/registry/escrows/1")
    assert at_one.json()["id"] == second["id"]

    missing = await client.get("/registry/escrows/5")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "INVALID_INDEX"


@pytest.mark.anyio("asyncio")
async def test_direct_create_rejects_amount_mismatch(client, owner, developer):
    response = await client.post(
        "/escrows",
        json={
            "project_name": "Underfunded",
            "developer": developer,
            "total_capital": "100.00",
            "deposited_amount": "99.00",
        },
        headers=_headers(owner),
    )
    assert response.status_code == 400
    payload = response.json()
    assert payload["error"]["code"] == "AMOUNT_MISMATCH"
    assert payload["error"]["details"] == {"total_capital": "100.00", "deposited_amount": "99.00"}


@pytest.mark.anyio("asyncio")
async def test_mutations_require_caller_header(client, owner, developer):
    response = await client.post(
        "/escrows",
        json={
            "project_name": "Anonymous",
            "developer": developer,
            "total_capital": "10.00",
            "deposited_amount": "10.00",
        },
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_CALLER"

    blank = await client.post(
        "/registry/escrows",
        json={
            "project_name": "Anonymous",
            "developer": developer,
            "total_capital": "10.00",
            "deposited_amount": "10.00",
        },
        headers=_headers("   "),
    )
    assert blank.status_code == 401


@pytest.mark.anyio("asyncio")
async def test_role_errors_over_http(client, owner, developer, stranger):
    escrow = await _create_registered_escrow(client, owner, developer)
    escrow_id = escrow["id"]

    not_owner = await client.post(
        f"/escrows/{escrow_id}/milestones",
        json={"title": "A", "tentative_date": 0, "amount": "10.00"},
        headers=_headers(stranger),
    )
    assert not_owner.status_code == 403
    assert not_owner.json()["error"]["code"] == "NOT_OWNER"

    await client.post(
        f"/escrows/{escrow_id}/milestones",
        json={"title": "A", "tentative_date": 0, "amount": "10.00"},
        headers=_headers(owner),
    )

    not_developer = await client.post(
        f"/escrows/{escrow_id}/milestones/0/complete",
        json={"proof": "x"},
        headers=_headers(owner),
    )
    assert not_developer.status_code == 403
    assert not_developer.json()["error"]["code"] == "NOT_DEVELOPER"

    not_completed = await client.post(f"/escrows/{escrow_id}/milestones/0/approve", headers=_headers(owner))
    assert not_completed.status_code == 409
    assert not_completed.json()["error"]["code"] == "NOT_COMPLETED"

    invalid = await client.post(
        f"/escrows/{escrow_id}/milestones/3/complete",
        json={"proof": "x"},
        headers=_headers(developer),
    )
    assert invalid.status_code == 404
    assert invalid.json()["error"]["code"] == "INVALID_INDEX"


@pytest.mark.anyio("asyncio")
async def test_unknown_escrow_returns_404(client):
    response = await client.get("/escrows/987654")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ESCROW_NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_commit_validates_payload(client, owner, developer):
    escrow = await _create_registered_escrow(client, owner, developer)

    negative = await client.post(
        f"/escrows/{escrow['id']}/milestones",
        json={"title": "A", "tentative_date": 0, "amount": "-1.00"},
        headers=_headers(owner),
    )
    assert negative.status_code == 422

    bad_date = await client.post(
        f"/escrows/{escrow['id']}/milestones",
        json={"title": "A", "tentative_date": -5, "amount": "1.00"},
        headers=_headers(owner),
    )
    assert bad_date.status_code == 422

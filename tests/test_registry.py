from decimal import Decimal

import pytest

from milestone_escrow.models import RegistryEntry
from milestone_escrow.schemas.escrow import EscrowCreate
from milestone_escrow.services import events as events_service
from milestone_escrow.services import registry as registry_service
from milestone_escrow.utils.errors import AmountMismatch, InvalidIndex


def _payload(name: str, developer: str, total: str = "100.00", deposit: str | None = None) -> EscrowCreate:
    return EscrowCreate(
        project_name=name,
        project_description=f"{name} project",
        developer=developer,
        total_capital=Decimal(total),
        deposited_amount=Decimal(deposit if deposit is not None else total),
    )


def test_registry_lists_escrows_in_creation_order(db_session, owner, stranger, developer):
    first = registry_service.create_escrow(db_session, _payload("Clinic", developer), caller=owner)
    second = registry_service.create_escrow(db_session, _payload("School", developer, "75.00"), caller=stranger)

    listed = registry_service.list_escrows(db_session)

    assert [e.id for e in listed] == [first.id, second.id]
    assert [e.owner for e in listed] == [owner, stranger]
    assert registry_service.escrow_count(db_session) == 2
    assert registry_service.escrow_at(db_session, 1).id == second.id


def test_registry_emits_project_created(db_session, owner, developer):
    escrow = registry_service.create_escrow(db_session, _payload("Clinic", developer), caller=owner)

    created = events_service.list_events(db_session, escrow.id, kind=events_service.PROJECT_CREATED)
    assert [e.data_json for e in created] == [{"escrow_id": escrow.id, "owner": owner}]


def test_registry_propagates_amount_mismatch(db_session, owner, developer):
    with pytest.raises(AmountMismatch):
        registry_service.create_escrow(
            db_session, _payload("Clinic", developer, "100.00", "99.99"), caller=owner
        )

    assert registry_service.escrow_count(db_session) == 0
    assert db_session.query(RegistryEntry).count() == 0


def test_directly_created_escrows_are_not_listed(db_session, make_escrow, owner, developer):
    make_escrow()
    registered = registry_service.create_escrow(db_session, _payload("Clinic", developer), caller=owner)

    assert [e.id for e in registry_service.list_escrows(db_session)] == [registered.id]


def test_escrow_at_out_of_range(db_session):
    with pytest.raises(InvalidIndex):
        registry_service.escrow_at(db_session, 0)


def test_registration_does_not_read_the_catalog_size(db_session, owner, developer, monkeypatch):
    def _no_count(db):
        raise AssertionError("create_escrow must not derive order from a count")

    monkeypatch.setattr(registry_service, "escrow_count", _no_count)

    first = registry_service.create_escrow(db_session, _payload("Clinic", developer), caller=owner)
    second = registry_service.create_escrow(db_session, _payload("School", developer), caller=owner)

    entries = db_session.query(RegistryEntry).order_by(RegistryEntry.id).all()
    assert [entry.escrow_id for entry in entries] == [first.id, second.id]
    assert registry_service.escrow_at(db_session, 0).id == first.id
    assert registry_service.escrow_at(db_session, 1).id == second.id


@pytest.mark.parametrize("position", [-1, 1])
def test_escrow_at_rejects_positions_outside_the_catalog(db_session, owner, developer, position):
    registry_service.create_escrow(db_session, _payload("Clinic", developer), caller=owner)

    with pytest.raises(InvalidIndex):
        registry_service.escrow_at(db_session, position)

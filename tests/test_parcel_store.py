"""
Tests for SqlParcelStore.

Runs every store operation against a real SQLite database.
"""

import random
from dataclasses import replace

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from core.storage import (
    Parcel,
    ParcelNotFoundError,
    ParcelStateError,
    ParcelStatus,
    SqlParcelStore,
)


def test_setup_is_idempotent(store):
    """Calling setup() again keeps existing rows."""
    store.add(Parcel(client=1, address="a"))
    store.setup()
    
    assert len(store.get_by_client(1)) == 1


def test_add_get_delete(store, make_parcel):
    """Test add -> get -> delete -> get fails."""
    parcel = make_parcel()
    
    number = store.add(parcel)
    assert number
    
    stored = store.get(number)
    assert stored == replace(parcel, number=number)
    
    store.delete(number)
    
    with pytest.raises(ParcelNotFoundError):
        store.get(number)


def test_first_parcel_gets_number_one(store):
    """Test the basic scenario on an empty table."""
    number = store.add(Parcel(client=1000, status="registered", address="test"))
    assert number == 1
    
    stored = store.get(1)
    assert stored.number == 1
    assert stored.client == 1000
    assert stored.status == "registered"
    assert stored.address == "test"
    
    store.delete(1)
    with pytest.raises(ParcelNotFoundError):
        store.get(1)


def test_get_unknown_number(store):
    with pytest.raises(ParcelNotFoundError) as exc_info:
        store.get(999)
    
    assert exc_info.value.number == 999
    assert isinstance(exc_info.value, LookupError)


def test_numbers_are_not_reused(store, make_parcel):
    """A deleted number is never handed out again."""
    first = store.add(make_parcel())
    second = store.add(make_parcel())
    store.delete(second)
    
    third = store.add(make_parcel())
    
    assert len({first, second, third}) == 3
    assert third > second


def test_add_keeps_fields_as_given(store):
    """No validation beyond what the table enforces."""
    parcel = Parcel(client=-5, address="", status="lost", created_at="not-a-date")
    
    number = store.add(parcel)
    
    assert store.get(number) == replace(parcel, number=number)


def test_add_propagates_storage_errors(store):
    """NOT NULL violations surface as the driver's error."""
    with pytest.raises(IntegrityError):
        store.add(Parcel(client=1, address=None))


def test_set_status(store, make_parcel):
    number = store.add(make_parcel())
    
    assert store.set_status(number, ParcelStatus.SENT) is True
    
    assert store.get(number).status == ParcelStatus.SENT.value


def test_set_status_accepts_any_value(store, make_parcel):
    number = store.add(make_parcel())
    
    store.set_status(number, "misrouted")
    
    assert store.get(number).status == "misrouted"


def test_set_status_unknown_number_is_noop(store, make_parcel):
    """Updating a missing row is not an error."""
    number = store.add(make_parcel())
    
    assert store.set_status(number + 100, ParcelStatus.SENT) is False
    assert store.get(number).status == ParcelStatus.REGISTERED.value


def test_set_address(store, make_parcel):
    number = store.add(make_parcel())
    new_address = "new test address"
    
    store.set_address(number, new_address)
    
    assert store.get(number).address == new_address


def test_set_address_unknown_number(store):
    with pytest.raises(ParcelNotFoundError) as exc_info:
        store.set_address(42, "anywhere")
    
    assert not isinstance(exc_info.value, ParcelStateError)


@pytest.mark.parametrize("status", [ParcelStatus.SENT, ParcelStatus.DELIVERED])
def test_set_address_refused_after_registration(store, make_parcel, status):
    parcel = make_parcel(address="original")
    number = store.add(parcel)
    store.set_status(number, status)
    
    with pytest.raises(ParcelStateError) as exc_info:
        store.set_address(number, "new")
    
    assert exc_info.value.number == number
    assert exc_info.value.status == status.value
    assert store.get(number).address == "original"


@pytest.mark.parametrize("status", [ParcelStatus.SENT, ParcelStatus.DELIVERED])
def test_delete_refused_after_registration(store, make_parcel, status):
    parcel = make_parcel()
    number = store.add(parcel)
    store.set_status(number, status)
    
    with pytest.raises(ParcelStateError):
        store.delete(number)
    
    assert store.get(number) == replace(parcel, number=number, status=status.value)


def test_delete_unknown_number(store):
    with pytest.raises(ParcelNotFoundError):
        store.delete(7)


def test_sent_parcel_refuses_changes_as_not_found(store, make_parcel):
    """The state refusal is still catchable as not-found."""
    number = store.add(make_parcel())
    store.set_status(number, "sent")
    
    with pytest.raises(ParcelNotFoundError):
        store.set_address(number, "new")
    with pytest.raises(ParcelNotFoundError):
        store.delete(number)


def test_get_by_client(store, make_parcel):
    client = random.randrange(10_000_000)
    parcels = [make_parcel(client=client) for _ in range(3)]
    store.add(make_parcel(client=client + 1))
    
    expected = {}
    for parcel in parcels:
        number = store.add(parcel)
        expected[number] = replace(parcel, number=number)
    
    stored = store.get_by_client(client)
    
    assert len(stored) == len(parcels)
    for parcel in stored:
        assert parcel == expected[parcel.number]


def test_get_by_client_ordered_by_number(store, make_parcel):
    numbers = [store.add(make_parcel(client=5)) for _ in range(4)]
    
    assert [p.number for p in store.get_by_client(5)] == sorted(numbers)


def test_get_by_client_without_parcels(store, make_parcel):
    store.add(make_parcel(client=1))
    
    assert store.get_by_client(2) == []


def test_setup_rejects_unsupported_dialect(engine, monkeypatch):
    monkeypatch.setattr(engine.dialect, "name", "oracle")
    
    with pytest.raises(ValueError, match="Unsupported database dialect"):
        SqlParcelStore(engine).setup()


def test_table_schema(store, engine):
    """The table exposes exactly the expected columns."""
    with engine.connect() as conn:
        columns = [row[1] for row in conn.execute(text("PRAGMA table_info(parcel)"))]
    
    assert columns == ["number", "client", "status", "address", "created_at"]

"""
test_store.py
=============
Document-style collections over the portal tables.
"""

import pytest

from doctors_portal.models import Role
from doctors_portal.seed import DEFAULT_SERVICES, seed_services


def test_insert_and_find_one(store):
    doc_id = store.doctors.insert({"email": "doc@x.com", "name": "Dr. Alice", "phone": "123"})

    doc = store.doctors.find_one({"email": "doc@x.com"})

    assert doc["_id"] == doc_id
    assert doc["name"] == "Dr. Alice"
    # free-form field round-trips through the extra column
    assert doc["phone"] == "123"


def test_find_one_missing_returns_none(store):
    assert store.users.find_one({"email": "nobody@x.com"}) is None


def test_list_all_with_filter_and_projection(store):
    store.services.insert({"name": "Cleaning", "slots": ["9am"]})
    store.services.insert({"name": "Surgery", "slots": ["1pm"]})

    names = store.services.list_all(projection=["name"])
    assert names == [{"_id": names[0]["_id"], "name": "Cleaning"}, {"_id": names[1]["_id"], "name": "Surgery"}]
    assert [s["name"] for s in store.services.list_all({"name": "Surgery"})] == ["Surgery"]


def test_filter_on_unknown_field_is_rejected(store):
    with pytest.raises(ValueError):
        store.users.list_all({"favourite_colour": "blue"})


def test_update_without_match_and_no_upsert_changes_nothing(store):
    result = store.users.update({"email": "ghost@x.com"}, {"role": Role.admin})
    assert result["matchedCount"] == 0
    assert result["upsertedId"] is None
    assert store.users.find_one({"email": "ghost@x.com"}) is None


def test_upsert_creates_then_merges_only_patched_fields(store):
    created = store.users.update({"email": "a@x.com"}, {"name": "Ann", "city": "Oslo"}, upsert=True)
    assert created["upsertedId"] is not None

    store.users.update({"email": "a@x.com"}, {"role": Role.admin})
    updated = store.users.update({"email": "a@x.com"}, {"name": "Anna"}, upsert=True)

    user = store.users.find_one({"email": "a@x.com"})
    assert updated["matchedCount"] == 1
    assert updated["modifiedCount"] == 1
    assert user["name"] == "Anna"
    assert user["city"] == "Oslo"
    assert user["role"] == "admin"


def test_missing_role_reads_as_regular(store):
    store.users.insert({"email": "a@x.com"})
    assert store.users.find_one({"email": "a@x.com"})["role"] == Role.regular.value


def test_delete(store):
    store.doctors.insert({"email": "doc@x.com"})
    assert store.doctors.delete({"email": "doc@x.com"})["deletedCount"] == 1
    assert store.doctors.delete({"email": "doc@x.com"})["deletedCount"] == 0


def test_create_booking_rejects_same_patient_treatment_date(store):
    booking = {"treatment": "Cleaning", "date": "2024-01-01", "slot": "9am", "patient": "a@x.com"}

    created, booking_id = store.create_booking(booking)
    again, existing = store.create_booking({**booking, "slot": "10am"})

    assert created is True
    assert again is False
    assert existing["_id"] == booking_id
    assert existing["slot"] == "9am"


def test_create_booking_resolves_lost_race_to_existing_booking(store, monkeypatch):
    booking = {"treatment": "Cleaning", "date": "2024-01-01", "slot": "9am", "patient": "a@x.com"}
    store.create_booking(booking)

    # Simulate a concurrent request that passed the existence check first
    real_find_one = store.bookings.find_one
    calls = []

    def find_one_missing_first(filter):
        calls.append(filter)
        return None if len(calls) == 1 else real_find_one(filter)

    monkeypatch.setattr(store.bookings, "find_one", find_one_missing_first)

    created, existing = store.create_booking({**booking, "slot": "10am"})

    assert created is False
    assert existing["slot"] == "9am"
    assert len(store.bookings.list_all({"patient": "a@x.com"})) == 1


def test_upsert_resolves_lost_race_by_patching_existing_record(store, monkeypatch):
    store.users.insert({"email": "a@x.com", "name": "first"})

    # Simulate a concurrent upsert that created the user after our lookup
    real_query = store.users._query
    calls = []

    def query_missing_first(filter):
        calls.append(filter)
        return real_query({"_id": -1}) if len(calls) == 1 else real_query(filter)

    monkeypatch.setattr(store.users, "_query", query_missing_first)

    result = store.users.update({"email": "a@x.com"}, {"name": "second"}, upsert=True)

    assert result["matchedCount"] == 1
    assert result["upsertedId"] is None
    assert store.users.find_one({"email": "a@x.com"})["name"] == "second"
    assert len(store.users.list_all()) == 1


def test_seed_services_only_seeds_empty_store(store):
    assert seed_services(store) == len(DEFAULT_SERVICES)
    assert seed_services(store) == 0
    assert [s["name"] for s in store.services.list_all()] == DEFAULT_SERVICES

"""Shared fixtures: a small family of three generations."""

import pytest

from kintime.models import EVENT, PERSON, SOURCE
from kintime.store import EntityStore


@pytest.fixture
def source_records():
    return [
        {"id": "S1", "title": "Parish register", "citation": "Book 4, p. 12"},
        {"id": "S2", "title": "Census 1960", "url": "https://example.org/census/1960"},
    ]


@pytest.fixture
def person_records():
    return [
        {"id": "F1", "name": "Founder One", "sex": "male", "born": "1758", "source_ids": ["S1"]},
        {"id": "C1", "name": "Child One", "sex": "female", "born": "1926", "father_id": "F1"},
        {"id": "C2", "name": "Child Two", "sex": "male", "born": "1955-03-02", "mother_id": "C1"},
    ]


@pytest.fixture
def event_records():
    return [
        {"id": "E1", "type": "death", "t": "1955", "who": ["C1"], "source_ids": ["S2"]},
    ]


@pytest.fixture
def store(source_records, person_records, event_records):
    """A loaded store that passes the integrity check."""
    store = EntityStore()
    store.load(SOURCE, source_records)
    store.load(PERSON, person_records)
    store.load(EVENT, event_records)
    store.check_integrity()
    return store


def make_store(persons, events=()):
    """Build a store from bare person and event records, without the integrity check."""
    store = EntityStore()
    store.load(PERSON, persons)
    store.load(EVENT, events)
    return store


def person(person_id, born=None, father_id=None, mother_id=None, **extra):
    record = {"id": person_id, "name": f"Person {person_id}", "sex": "unknown"}
    if born is not None:
        record["born"] = born
    if father_id is not None:
        record["father_id"] = father_id
    if mother_id is not None:
        record["mother_id"] = mother_id
    record.update(extra)
    return record

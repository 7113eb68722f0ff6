"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models import Member
from services.member_store import MemberStore
from services.notifications import Notifier
from services.persistence import MemoryStore, PersistenceAdapter


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def kv_store() -> MemoryStore:
    """In-memory key-value store standing in for the data directory."""
    return MemoryStore()


@pytest.fixture
def persistence(kv_store: MemoryStore, notifier: Notifier) -> PersistenceAdapter:
    return PersistenceAdapter(kv_store, notifier)


@pytest.fixture
def store(persistence: PersistenceAdapter) -> MemberStore:
    """An empty store that auto-saves to memory."""
    return MemberStore(persistence)


@pytest.fixture
def family(store: MemberStore) -> dict:
    """Parents, two children and a grandchild, linked both ways."""
    dad = store.create({"name": "Rajesh Kumar", "gender": "male", "dob": "1968-05-12"})
    mum = store.create({"name": "Sushma Kumar", "gender": "female", "spouse": dad.id})
    store.update(dad.id, {"spouse": mum.id})
    son = store.create({"name": "Amit Kumar", "gender": "male", "father": dad.id,
                        "mother": mum.id, "occupation": "Software Developer"})
    daughter = store.create({"name": "Priya Kumar", "gender": "female", "father": dad.id,
                             "mother": mum.id, "dob": "1998-09-18"})
    grandchild = store.create({"name": "Kiran Kumar", "father": son.id})
    store.update(dad.id, {"children": [son.id, daughter.id]})
    store.update(mum.id, {"children": [son.id, daughter.id]})
    store.update(son.id, {"children": [grandchild.id]})
    return {
        "dad": dad.id,
        "mum": mum.id,
        "son": son.id,
        "daughter": daughter.id,
        "grandchild": grandchild.id,
    }


# =============================================================================
# Plain Member Fixtures
# =============================================================================

@pytest.fixture
def chain() -> List[Member]:
    """A -> B -> C, linked by children and father."""
    return [
        Member(id="a", name="A", gender="male", children=["b"]),
        Member(id="b", name="B", gender="male", father="a", children=["c"]),
        Member(id="c", name="C", father="b"),
    ]


@pytest.fixture
def cyclic_pair() -> List[Member]:
    """Two root members listing each other as children."""
    return [
        Member(id="a", name="A", children=["b"]),
        Member(id="b", name="B", children=["a"]),
    ]


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(store: MemberStore, notifier: Notifier) -> TestClient:
    """Test client over an app bound to the in-memory store."""
    return TestClient(create_app(store=store, notifier=notifier))

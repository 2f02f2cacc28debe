"""Shared fixtures: in-memory storage, ready engines and a fixed clock."""

import pytest

from storefront.cart import CartEngine
from storefront.loyalty import LoyaltyEngine
from storefront.persistence import BackgroundPersister
from storefront.storage import MemoryStorage

from .fixtures import FIXED_NOW, line_item


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def persister(storage):
    persister = BackgroundPersister(storage, name="test")
    yield persister
    persister.close()


@pytest.fixture
def cart(persister):
    engine = CartEngine(persister)
    assert engine.wait_until_ready(timeout=5)
    return engine


@pytest.fixture
def loyalty(persister, clock):
    engine = LoyaltyEngine(persister, clock=clock)
    assert engine.wait_until_ready(timeout=5)
    return engine


@pytest.fixture
def make_item():
    """Factory for cart line items with sensible defaults."""
    return line_item

"""Shared test fixtures for the customer service test suite."""

import os

import pytest

from core.models import AddressCreate, CustomerCreate


# =============================================================================
# PAYLOAD FACTORIES
# =============================================================================


def _make_customer(phone: str = "1111111111", first: str = "Asha", last: str = "Rao") -> CustomerCreate:
    return CustomerCreate(first_name=first, last_name=last, phone_number=phone)


def _make_address(
    city: str = "Pune",
    state: str = "MH",
    pin: str = "411001",
    line: str = "12 MG Road",
    primary: bool = False,
) -> AddressCreate:
    return AddressCreate(
        address_line=line, city=city, state=state, pin_code=pin, is_primary=primary
    )


@pytest.fixture
def make_customer():
    """Factory for CustomerCreate payloads."""
    return _make_customer


@pytest.fixture
def make_address():
    """Factory for AddressCreate payloads."""
    return _make_address


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def memory_store():
    """Fresh, empty in-memory record store."""
    from core.stores import MemoryRecordStore

    return MemoryRecordStore()


@pytest.fixture(scope="session")
def db():
    """
    Session-scoped PostgresClient against TEST_DATABASE_URL.

    Tests that need a real database are skipped when it is not set.
    """
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")

    from clients.postgres_client import PostgresClient

    client = PostgresClient(url)
    yield client
    client.close()


@pytest.fixture
def postgres_store(db):
    """PostgresRecordStore on an emptied schema."""
    from core.stores import PostgresRecordStore

    store = PostgresRecordStore(db)
    store.initialize()
    db.execute("TRUNCATE customers, addresses RESTART IDENTITY CASCADE")
    return store

"""
Shared pytest fixtures and configuration for tablemap tests.

This module provides:
- Classifier cache and structlog cleanup for test isolation
- SQLite-backed connection and entity manager fixtures
- A recording fake connection for statement-level assertions
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

# Ensure tablemap and the tests package are importable
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from tablemap.connection import SqlAlchemyConnection, create_connection  # noqa: E402
from tablemap.entity_manager import EntityManager  # noqa: E402
from tablemap.metadata.classifier import clear_classifier_cache  # noqa: E402
from tablemap.settings import TablemapSettings  # noqa: E402
from tests._support.recording import RecordingConnection  # noqa: E402

SCHEMA = [
    """
    CREATE TABLE products (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        price_amount INTEGER,
        price_currency TEXT
    )
    """,
    """
    CREATE TABLE customers (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT,
        address_street TEXT,
        address_city TEXT,
        address_postcode TEXT,
        active BOOLEAN
    )
    """,
    """
    CREATE TABLE invoices (
        id INTEGER PRIMARY KEY,
        amount REAL,
        customer_id INTEGER,
        paid BOOLEAN
    )
    """,
    """
    CREATE TABLE orders (
        id TEXT PRIMARY KEY,
        customer_id INTEGER,
        lines TEXT,
        tags TEXT,
        notes TEXT
    )
    """,
    """
    CREATE TABLE wishlist (
        id INTEGER PRIMARY KEY,
        owner_id INTEGER,
        products TEXT
    )
    """,
    """
    CREATE TABLE basket (
        id INTEGER PRIMARY KEY,
        products TEXT
    )
    """,
    """
    CREATE TABLE subscription (
        id INTEGER PRIMARY KEY,
        customer_id INTEGER,
        trial BOOLEAN,
        plan TEXT
    )
    """,
    """
    CREATE TABLE parcels (
        id TEXT PRIMARY KEY,
        weight REAL
    )
    """,
    """
    CREATE TABLE shipments (
        id INTEGER PRIMARY KEY,
        parcel_id TEXT,
        extras TEXT
    )
    """,
]


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_classifier_cache() -> Generator[None, None, None]:
    """Every test classifies its types from scratch."""
    clear_classifier_cache()
    yield
    clear_classifier_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()


# =============================================================================
# Connections
# =============================================================================


@pytest.fixture
def settings() -> TablemapSettings:
    return TablemapSettings(database_url="sqlite://", echo_sql=False)


@pytest.fixture
def connection(settings: TablemapSettings) -> Generator[SqlAlchemyConnection, None, None]:
    """In-memory SQLite connection with the shop schema."""
    conn = create_connection(settings=settings)
    for statement in SCHEMA:
        conn.execute(statement).close()
    yield conn
    conn.close()


@pytest.fixture
def em(connection: SqlAlchemyConnection) -> EntityManager:
    return EntityManager(connection)


@pytest.fixture
def recording() -> RecordingConnection:
    return RecordingConnection()

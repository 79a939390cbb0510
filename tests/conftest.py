"""
Pytest configuration and fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from sqlalchemy import create_engine  # noqa: E402

from core.storage import Parcel, ParcelStatus, SqlParcelStore, utc_timestamp  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine, fresh for every test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'parcels.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    """Parcel store with the table created."""
    store = SqlParcelStore(engine)
    store.setup()
    return store


@pytest.fixture
def make_parcel():
    """Factory for a registered test parcel."""
    def _make(client: int = 1000, address: str = "test") -> Parcel:
        return Parcel(
            client=client,
            status=ParcelStatus.REGISTERED.value,
            address=address,
            created_at=utc_timestamp(),
        )
    return _make

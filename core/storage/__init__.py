"""
Storage abstraction layer.

Provides parcel persistence:
- Parcel record and status vocabulary
- Parcel store (add, get, get_by_client, set_status, set_address, delete)

Supported backends:
- SQLite
- PostgreSQL
"""

from core.storage.base import (
    BaseParcelStore,
    Parcel,
    ParcelStatus,
    utc_timestamp,
)
from core.storage.errors import (
    ParcelNotFoundError,
    ParcelStateError,
    ParcelStoreError,
)
from core.storage.factory import (
    create_engine_from_settings,
    create_parcel_store,
    get_storage_backend,
    StorageBackend,
)
from core.storage.sql import SqlParcelStore

__all__ = [
    # Data model
    "Parcel",
    "ParcelStatus",
    "utc_timestamp",
    # Abstract interface and implementation
    "BaseParcelStore",
    "SqlParcelStore",
    # Errors
    "ParcelStoreError",
    "ParcelNotFoundError",
    "ParcelStateError",
    # Factory functions
    "create_engine_from_settings",
    "create_parcel_store",
    "get_storage_backend",
    "StorageBackend",
]

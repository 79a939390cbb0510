"""
Storage factory for creating the parcel store.

This module provides factory functions to create the engine and store
implementation based on configuration.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from core.logging import get_logger
from core.storage.base import BaseParcelStore


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    SQLITE = "sqlite"
    POSTGRES = "postgresql"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.
    
    Args:
        settings: Application settings
        
    Returns:
        The backend named by the database URL
    """
    backend_str = make_url(settings.database_url).get_backend_name().lower()
    
    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


def create_engine_from_settings(settings: "Settings") -> Engine:
    """
    Create a SQLAlchemy engine for the configured database.
    
    The caller owns the engine and should dispose() it on shutdown.
    """
    backend = get_storage_backend(settings)
    
    logger.info("Creating database engine", backend=backend.value)
    return create_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
    )


def create_parcel_store(
    settings: "Settings",
    engine: Optional[Engine] = None,
) -> BaseParcelStore:
    """
    Create a parcel store instance based on settings.
    
    Args:
        settings: Application settings
        engine: Existing engine to reuse; created from settings if omitted
        
    Returns:
        Configured store instance (table not yet created, call setup())
    """
    from core.storage.sql import SqlParcelStore
    
    if engine is None:
        engine = create_engine_from_settings(settings)
    
    return SqlParcelStore(engine)

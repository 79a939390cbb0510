"""
Parcel record and the abstract store contract.

This module defines the data model shared by every storage implementation
and the operations a parcel store must provide.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


class ParcelStatus(str, Enum):
    """
    Parcel status vocabulary.
    
    Status flow:
        REGISTERED → SENT → DELIVERED
    Only REGISTERED is enforced by the store: address changes and
    deletion require it.
    """
    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"


def utc_timestamp() -> str:
    """Current UTC time as an RFC 3339 string with second precision."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def status_value(status: Union[ParcelStatus, str]) -> str:
    """Plain string for a status, whether given as enum member or text."""
    if isinstance(status, ParcelStatus):
        return status.value
    return status


@dataclass
class Parcel:
    """
    A shipment record.
    
    number is assigned by the store on add() and is None until then.
    """
    client: int
    address: str
    status: str = ParcelStatus.REGISTERED.value
    created_at: str = field(default_factory=utc_timestamp)
    number: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the column mapping used by the parcel table."""
        return {
            "number": self.number,
            "client": self.client,
            "status": status_value(self.status),
            "address": self.address,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Parcel":
        """Create from a row mapping."""
        return cls(
            number=data["number"],
            client=data["client"],
            status=data["status"],
            address=data["address"],
            created_at=data["created_at"],
        )


class BaseParcelStore(ABC):
    """
    Abstract base class for parcel storage.
    
    Implementations receive an already-open storage handle and never
    manage credentials or connection lifecycle themselves.
    """
    
    @abstractmethod
    def setup(self) -> None:
        """
        Create the parcel table if it does not exist.
        
        This should be idempotent - safe to call multiple times.
        """
        pass
    
    @abstractmethod
    def add(self, parcel: Parcel) -> int:
        """Persist a parcel and return its newly assigned number."""
        pass
    
    @abstractmethod
    def get(self, number: int) -> Parcel:
        """
        Get a parcel by number.
        
        Raises ParcelNotFoundError if no row matches.
        """
        pass
    
    @abstractmethod
    def get_by_client(self, client: int) -> list[Parcel]:
        """All parcels of a client ordered by number; empty if none."""
        pass
    
    @abstractmethod
    def set_status(self, number: int, status: Union[ParcelStatus, str]) -> bool:
        """
        Overwrite the status of a parcel.
        
        Any value is accepted and a missing row is not an error.
        Returns True if a row was updated.
        """
        pass
    
    @abstractmethod
    def set_address(self, number: int, address: str) -> None:
        """
        Change the address of a registered parcel.
        
        Raises ParcelNotFoundError if the parcel is missing and
        ParcelStateError if it is no longer registered.
        """
        pass
    
    @abstractmethod
    def delete(self, number: int) -> None:
        """
        Remove a registered parcel.
        
        Raises the same errors as set_address.
        """
        pass

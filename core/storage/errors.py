"""
Errors raised by the parcel store.

Storage failures from the driver are not wrapped: callers receive the
original sqlalchemy.exc.SQLAlchemyError subclass.
"""

from typing import Optional


class ParcelStoreError(Exception):
    """Base class for errors raised by the parcel store itself."""


class ParcelNotFoundError(ParcelStoreError, LookupError):
    """
    No parcel matches the given number.
    
    Also the refusal signal for guarded operations: see ParcelStateError.
    """
    
    def __init__(self, number: int, message: Optional[str] = None):
        self.number = number
        super().__init__(message or f"parcel {number} not found")


class ParcelStateError(ParcelNotFoundError):
    """
    The parcel exists but its status does not allow the operation.
    
    Subclasses ParcelNotFoundError so that callers handling "not found"
    as a generic refusal keep working.
    """
    
    def __init__(self, number: int, status: str):
        self.status = status
        super().__init__(
            number,
            f"parcel {number} has status {status!r}, operation requires 'registered'",
        )

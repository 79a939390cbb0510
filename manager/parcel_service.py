"""
Parcel lifecycle service.

Sits between callers and the parcel store, and owns the status flow
registered → sent → delivered.
"""

from typing import Optional

from core.logging import get_logger
from core.storage import BaseParcelStore, Parcel, ParcelStatus, utc_timestamp


logger = get_logger(__name__)


# Status each status advances to; delivered is terminal
_NEXT_STATUS: dict[str, Optional[str]] = {
    ParcelStatus.REGISTERED.value: ParcelStatus.SENT.value,
    ParcelStatus.SENT.value: ParcelStatus.DELIVERED.value,
    ParcelStatus.DELIVERED.value: None,
}


class ParcelService:
    """
    Parcel lifecycle manager.
    
    - Register new parcels
    - Advance a parcel to its next status
    - Change address or delete while still registered
    - List a client's parcels
    
    Store errors are never caught here; they reach the caller as raised.
    """
    
    def __init__(self, store: BaseParcelStore):
        self._store = store
    
    def register(self, client: int, address: str) -> Parcel:
        """Create a registered parcel and return it with its number."""
        parcel = Parcel(
            client=client,
            address=address,
            status=ParcelStatus.REGISTERED.value,
            created_at=utc_timestamp(),
        )
        parcel.number = self._store.add(parcel)
        
        logger.info(
            "Parcel registered",
            number=parcel.number,
            client=client,
            address=address,
            created_at=parcel.created_at,
        )
        return parcel
    
    def next_status(self, number: int) -> str:
        """
        Move a parcel one step along its status flow.
        
        Returns the resulting status. A delivered parcel is left as is.
        Unknown statuses are treated as terminal.
        """
        parcel = self._store.get(number)
        
        following = _NEXT_STATUS.get(parcel.status)
        if following is None:
            logger.info("Parcel status unchanged", number=number, status=parcel.status)
            return parcel.status
        
        self._store.set_status(number, following)
        logger.info(
            "Parcel status changed",
            number=number,
            previous=parcel.status,
            status=following,
        )
        return following
    
    def change_address(self, number: int, address: str) -> None:
        """Change the address of a registered parcel."""
        self._store.set_address(number, address)
        logger.info("Parcel address changed", number=number, address=address)
    
    def delete(self, number: int) -> None:
        """Delete a registered parcel."""
        self._store.delete(number)
        logger.info("Parcel deleted", number=number)
    
    def client_parcels(self, client: int) -> list[Parcel]:
        """All parcels of a client, in number order."""
        parcels = self._store.get_by_client(client)
        logger.debug("Client parcels listed", client=client, count=len(parcels))
        return parcels

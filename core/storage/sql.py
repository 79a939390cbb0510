"""
SQLAlchemy storage backend implementation.

Runs plain SQL through an injected Engine, so the same store works on
SQLite and PostgreSQL. The engine owns the connection pool and is
shared by every caller; the store adds no locking of its own.
"""

from typing import Any, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from core.logging import get_logger
from core.storage.base import BaseParcelStore, Parcel, ParcelStatus, status_value
from core.storage.errors import ParcelNotFoundError, ParcelStateError


logger = get_logger(__name__)


# The number column must never hand out a value twice, even after deletes
_NUMBER_COLUMN_DDL = {
    "sqlite": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "postgresql": "INTEGER GENERATED ALWAYS AS IDENTITY PRIMARY KEY",
}

_COLUMNS = "number, client, status, address, created_at"


class SqlParcelStore(BaseParcelStore):
    """
    Parcel store on top of a SQLAlchemy engine.
    
    Each operation runs in its own transaction. Guarded mutations are a
    single conditional statement, so a concurrent status change cannot
    slip in between the check and the write.
    """
    
    def __init__(self, engine: Engine):
        """
        Initialize the store.
        
        Args:
            engine: Open SQLAlchemy engine; its lifecycle belongs to the caller
        """
        self._engine = engine
    
    def setup(self) -> None:
        """Create the parcel table and client index if not exists."""
        dialect = self._engine.dialect.name
        try:
            number_ddl = _NUMBER_COLUMN_DDL[dialect]
        except KeyError:
            raise ValueError(
                f"Unsupported database dialect: {dialect}. "
                f"Supported dialects: {sorted(_NUMBER_COLUMN_DDL)}"
            )
        
        with self._engine.begin() as conn:
            conn.execute(text(f"""
                CREATE TABLE IF NOT EXISTS parcel (
                    number {number_ddl},
                    client INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    address TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """))
            
            conn.execute(text("""
                CREATE INDEX IF NOT EXISTS idx_parcel_client
                ON parcel(client)
            """))
        
        logger.info("Parcel table initialized", dialect=dialect)
    
    def add(self, parcel: Parcel) -> int:
        """Insert a parcel and return the number assigned by the database."""
        params = parcel.to_dict()
        del params["number"]
        insert = (
            "INSERT INTO parcel (client, status, address, created_at) "
            "VALUES (:client, :status, :address, :created_at)"
        )
        
        with self._engine.begin() as conn:
            if conn.dialect.insert_returning:
                result = conn.execute(text(insert + " RETURNING number"), params)
                number = result.scalar_one()
            else:
                number = conn.execute(text(insert), params).lastrowid
        
        logger.debug("Parcel added", number=number, client=parcel.client)
        return int(number)
    
    def get(self, number: int) -> Parcel:
        """Get a parcel by number."""
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {_COLUMNS} FROM parcel WHERE number = :number"),
                {"number": number},
            ).mappings().first()
        
        if row is None:
            raise ParcelNotFoundError(number)
        return Parcel.from_dict(dict(row))
    
    def get_by_client(self, client: int) -> list[Parcel]:
        """Get all parcels of a client, oldest number first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {_COLUMNS} FROM parcel
                    WHERE client = :client
                    ORDER BY number ASC
                """),
                {"client": client},
            ).mappings().all()
        
        return [Parcel.from_dict(dict(row)) for row in rows]
    
    def set_status(self, number: int, status: Union[ParcelStatus, str]) -> bool:
        """Overwrite the status; a missing number updates nothing."""
        with self._engine.begin() as conn:
            result = conn.execute(
                text("UPDATE parcel SET status = :status WHERE number = :number"),
                {"status": status_value(status), "number": number},
            )
        
        updated = result.rowcount > 0
        if updated:
            logger.debug("Parcel status set", number=number, status=status_value(status))
        return updated
    
    def set_address(self, number: int, address: str) -> None:
        """Change the address while the parcel is still registered."""
        with self._engine.begin() as conn:
            self._execute_guarded(
                conn,
                number,
                """
                    UPDATE parcel SET address = :address
                    WHERE number = :number AND status = :required
                """,
                {"address": address},
            )
        
        logger.debug("Parcel address set", number=number)
    
    def delete(self, number: int) -> None:
        """Delete the parcel while it is still registered."""
        with self._engine.begin() as conn:
            self._execute_guarded(
                conn,
                number,
                "DELETE FROM parcel WHERE number = :number AND status = :required",
            )
        
        logger.debug("Parcel deleted", number=number)
    
    def _execute_guarded(
        self,
        conn: Connection,
        number: int,
        statement: str,
        params: dict[str, Any] | None = None,
    ) -> None:
        """
        Run a statement that only touches the row while it is registered.
        
        When nothing was affected, read the row in the same transaction
        to tell a missing parcel from one in the wrong status.
        """
        bound = {
            **(params or {}),
            "number": number,
            "required": ParcelStatus.REGISTERED.value,
        }
        result = conn.execute(text(statement), bound)
        if result.rowcount > 0:
            return
        
        current = conn.execute(
            text("SELECT status FROM parcel WHERE number = :number"),
            {"number": number},
        ).scalar_one_or_none()
        
        if current is None:
            raise ParcelNotFoundError(number)
        raise ParcelStateError(number, current)

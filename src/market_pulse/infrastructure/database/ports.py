"""
Database adapter interface.
Provides abstraction over database operations for dependency injection.

Queries are written with PostgreSQL-style positional placeholders
($1, $2, ...). Adapters for other backends translate them.
"""

from typing import Any, Literal, Protocol

Backend = Literal["postgresql", "sqlite"]


class IDatabaseAdapter(Protocol):
    """
    Protocol defining database operations interface.
    Enables dependency injection and testing with different implementations.
    """

    backend: Backend

    async def connect(self) -> None:
        """Establish database connection."""
        ...

    async def disconnect(self) -> None:
        """Close database connection."""
        ...

    async def execute(self, query: str, *args: Any) -> None:
        """
        Execute a statement in its own transaction.

        Raises:
            UniqueConstraintError: UNIQUE constraint rejected the write
            ForeignKeyViolationError: FOREIGN KEY constraint rejected the write
            StorageError: Any other driver fault or timeout
        """
        ...

    async def fetch(self, query: str, *args: Any) -> list[dict[str, Any]]:
        """Fetch all rows as list of dictionaries."""
        ...

    async def fetchrow(self, query: str, *args: Any) -> dict[str, Any] | None:
        """Fetch single row as dictionary."""
        ...

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Fetch first column of the first row."""
        ...

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        ...

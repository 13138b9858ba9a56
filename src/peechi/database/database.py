"""
Database initialization and shutdown.

``Database`` opens the shared connection, applies the schema and exposes the
connection manager to the repositories (user ledger, remote config).

Lifecycle:
    1. ``await database.initialize()`` at program startup
    2. Repositories use ``database.connection`` for reads and transactions
    3. ``await database.shutdown()`` at program end
"""

from __future__ import annotations

from pathlib import Path

from peechi.database.db_connection import ConnectionManager
from peechi.database.db_schema import SchemaManager
from peechi.util.logger import get_logger

logger = get_logger("database")

DB_PATH = Path("./data/peechi.db").resolve()


class Database:
    """Owns the connection manager and schema setup for one database file."""

    def __init__(self, db_path: Path | str = DB_PATH, connection: ConnectionManager | None = None):
        self.db_path = db_path
        self.connection = connection or ConnectionManager()
        self._initialized = False

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection.open(self.db_path)
            await SchemaManager.initialize_schema(self.connection.connection)
        except Exception as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self.connection.close()
            return False

        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)
        return True

    async def shutdown(self) -> None:
        """Close the connection. Safe to call more than once."""
        if not self._initialized:
            return

        await self.connection.close()
        self._initialized = False
        logger.info("[DATABASE] Database shutdown complete")

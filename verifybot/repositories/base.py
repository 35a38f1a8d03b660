"""
Base repository classes providing common storage operations.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, List, Any
import sqlite3
import os

T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for all repositories.

    Defines a small key-value interface so the services never depend on
    how entities are stored. Implementations may sit on a flat file, an
    embedded database or a remote store.
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        """Get an entity by its ID."""
        pass

    @abstractmethod
    def get_all(self, limit: int = 100) -> List[T]:
        """Get all entities, with optional limit."""
        pass

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or replace an entity."""
        pass


class SqliteRepository(BaseRepository[T]):
    """
    Repository base backed by SQLite.

    Provides connection handling and query helpers. A shared connection
    can be installed for all repositories (tests use an in-memory one).
    """

    _shared_connection: Optional[sqlite3.Connection] = None
    _shared_db_path: Optional[str] = None

    @classmethod
    def set_shared_connection(cls, conn: sqlite3.Connection, db_path: str):
        """Set a shared connection for all SQLite repositories."""
        SqliteRepository._shared_connection = conn
        SqliteRepository._shared_db_path = db_path

    @classmethod
    def clear_shared_connection(cls):
        SqliteRepository._shared_connection = None
        SqliteRepository._shared_db_path = None

    def __init__(self, db_path: Optional[str] = None, use_shared: bool = True):
        """
        Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database. If None, uses the shared path.
            use_shared: If True and shared connection exists, use it.
        """
        self._use_shared = use_shared and SqliteRepository._shared_connection is not None

        if db_path is None:
            if self._use_shared and SqliteRepository._shared_db_path:
                db_path = SqliteRepository._shared_db_path
            else:
                raise ValueError("db_path is required when no shared connection is set")
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            directory = os.path.dirname(self._db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """
        Get a database connection.

        If shared connection is available and enabled, returns it.
        Otherwise creates a new connection.
        """
        if self._use_shared and SqliteRepository._shared_connection is not None:
            return SqliteRepository._shared_connection
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _close(self, conn: sqlite3.Connection):
        if conn is not SqliteRepository._shared_connection:
            conn.close()

    def _execute(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """
        Execute a query and return all results.

        Args:
            query: SQL query string
            params: Query parameters

        Returns:
            List of Row objects
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            self._close(conn)

    def _execute_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return the first result."""
        results = self._execute(query, params)
        return results[0] if results else None

    def _execute_write(self, query: str, params: tuple = ()) -> int:
        """
        Execute a write query (INSERT, UPDATE, DELETE).

        Returns:
            Last row ID for INSERT, or rows affected for UPDATE/DELETE
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            conn.commit()
            return cursor.lastrowid
        finally:
            self._close(conn)

    @abstractmethod
    def _row_to_entity(self, row: sqlite3.Row) -> T:
        """Convert a database row to an entity object."""
        pass

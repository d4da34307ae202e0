"""
Archiver metadata store for the failover monitor.

This module manages the SQLite database that records archiver nodes:
- One row per archiver (id, name, host)
- A dedicated sequence that hands out archiver ids
- Schema version tracking

Archivers are auxiliary worker nodes of a replicated formation. The
orchestration layer registers them here, looks them up by id and removes
them; it never writes the table directly.

Invariants:
    - Archiver ids come from the archiver_nodeid_seq row, never from memory
    - Drawing an id, naming the archiver and inserting the row is one
      BEGIN IMMEDIATE transaction
    - A default name is computed from the id drawn inside that transaction
    - Every call opens and closes its own connection
    - Name and host are immutable after insert (no update operation)

How to change safely:
    - Never reset or reseed the sequence row; ids must not be reused
    - Keep the default name pattern stable, callers match on it
    - Run schema changes through initialize() and bump SCHEMA_VERSION

Table schema:
    archiver:
        - nodeid INTEGER PRIMARY KEY
        - nodename TEXT NOT NULL (non-empty)
        - nodehost TEXT NOT NULL (non-empty)

    archiver_nodeid_seq:
        - name TEXT PRIMARY KEY
        - last_value INTEGER (last id handed out)
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from ..errors import ArchiverNotFoundError, InvalidArgumentError, StorageFailureError

logger = logging.getLogger(__name__)

ARCHIVER_TABLE = "archiver"
ARCHIVER_SEQUENCE = "archiver_nodeid_seq"
DEFAULT_NAME_PREFIX = "archiver_"

# Archiver ids are 64-bit signed integers
NODE_ID_MIN = -(2**63)
NODE_ID_MAX = 2**63 - 1


@dataclass(frozen=True)
class ArchiverNode:
    """An archiver registered with the monitor.

    Attributes:
        node_id: Unique archiver identifier
        node_name: Human readable name (archiver_<node_id> unless given)
        node_host: Host address the archiver runs on
    """

    node_id: int
    node_name: str
    node_host: str


def default_archiver_name(node_id: int) -> str:
    """Name given to an archiver registered without one."""
    return f"{DEFAULT_NAME_PREFIX}{node_id}"


def _check_node_id(node_id: object) -> int:
    if isinstance(node_id, bool) or not isinstance(node_id, int):
        raise InvalidArgumentError(
            f"node_id must be an integer, got {type(node_id).__name__}",
            argument="node_id",
        )
    return node_id


def _bindable_node_id(node_id: int) -> int | None:
    # NULL matches no row; ids beyond 64 bits cannot be bound
    if NODE_ID_MIN <= node_id <= NODE_ID_MAX:
        return node_id
    return None


class ArchiverStore:
    """SQLite store for archiver metadata.

    This class owns the archiver table and its id sequence, providing:
    - Registration with atomic id allocation and name defaulting
    - Point lookup by id
    - Removal by id
    - Listing for administration

    Thread safety:
        Each operation opens its own connection. Writers serialize on
        SQLite's reserved lock (BEGIN IMMEDIATE), waiting up to the busy
        timeout. No state is shared between calls.

    Example:
        >>> store = ArchiverStore("/var/lib/failover-monitor")
        >>> store.initialize()
        >>> node_id = store.add_archiver(None, "10.0.0.1")
        >>> store.get_archiver(node_id).node_name
        'archiver_1'
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        data_dir: str,
        database_name: str = "monitor.db",
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        cache_size_pages: int = -64000,
    ) -> None:
        """Initialize the archiver store.

        Args:
            data_dir: Directory holding the monitor database
            database_name: Database file name inside data_dir
            wal_mode: Enable SQLite WAL mode
            busy_timeout_ms: SQLite busy timeout
            cache_size_pages: SQLite cache size (negative = KB)
        """
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / database_name
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self.cache_size_pages = cache_size_pages

    @classmethod
    def from_settings(cls, settings) -> ArchiverStore:
        """Build a store from MonitorSettings."""
        return cls(
            data_dir=settings.data_dir,
            database_name=settings.database_name,
            wal_mode=settings.wal_mode,
            busy_timeout_ms=settings.busy_timeout_ms,
            cache_size_pages=settings.cache_size_pages,
        )

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        """Translate SQLite failures into StorageFailureError."""
        try:
            yield
        except sqlite3.Error as e:
            logger.error(
                f"could not {operation} {ARCHIVER_TABLE}: {e}",
                extra={"operation": operation, "db_path": str(self.db_path)},
            )
            raise StorageFailureError(
                f"could not {operation} {ARCHIVER_TABLE}: {e}",
                operation=operation,
                db_path=str(self.db_path),
            ) from e

    @contextmanager
    def _get_connection(self, create: bool = False) -> Iterator[sqlite3.Connection]:
        """Open a connection for a single operation.

        Args:
            create: Whether to create the database if it does not exist

        Yields:
            SQLite connection

        Raises:
            StorageFailureError: If the database doesn't exist and create=False
        """
        if not create and not self.db_path.exists():
            raise StorageFailureError(
                f"Monitor database not found: {self.db_path}",
                operation="connect",
                db_path=str(self.db_path),
            )

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.busy_timeout_ms / 1000.0,
            isolation_level=None,  # Autocommit by default, explicit transactions
        )
        conn.row_factory = sqlite3.Row

        try:
            conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
            conn.execute(f"PRAGMA cache_size = {self.cache_size_pages}")
            if self.wal_mode:
                conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")

            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection) -> Iterator[None]:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

    def initialize(self) -> None:
        """Create the archiver table and id sequence if they don't exist.

        Safe to call repeatedly; an existing sequence keeps its value.
        """
        with self._storage_errors("initialize"), self._get_connection(create=True) as conn:
            with self._transaction(conn):
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS schema_version (
                        version INTEGER PRIMARY KEY,
                        applied_at INTEGER NOT NULL
                    )
                """)
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {ARCHIVER_TABLE} (
                        nodeid INTEGER PRIMARY KEY,
                        nodename TEXT NOT NULL CHECK (nodename <> ''),
                        nodehost TEXT NOT NULL CHECK (nodehost <> '')
                    )
                """)
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {ARCHIVER_SEQUENCE} (
                        name TEXT PRIMARY KEY,
                        last_value INTEGER NOT NULL
                    )
                """)
                conn.execute(
                    f"INSERT OR IGNORE INTO {ARCHIVER_SEQUENCE} (name, last_value) VALUES (?, 0)",
                    (ARCHIVER_SEQUENCE,),
                )
                conn.execute(
                    """
                    INSERT OR IGNORE INTO schema_version (version, applied_at)
                    VALUES (?, strftime('%s', 'now') * 1000)
                    """,
                    (self.SCHEMA_VERSION,),
                )

        logger.info(f"Initialized monitor database: {self.db_path}")

    def exists(self) -> bool:
        """Check if the monitor database exists."""
        return self.db_path.exists()

    def get_archiver(self, node_id: int) -> ArchiverNode | None:
        """Get an archiver by id.

        A missing archiver is a normal outcome, not an error.

        Args:
            node_id: Archiver identifier

        Returns:
            ArchiverNode or None if no archiver has this id

        Raises:
            InvalidArgumentError: If node_id is not an integer
            StorageFailureError: If the lookup cannot run
        """
        node_id = _check_node_id(node_id)

        with self._storage_errors("select from"), self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT nodeid, nodename, nodehost FROM {ARCHIVER_TABLE} WHERE nodeid = ?",
                (_bindable_node_id(node_id),),
            )
            row = cursor.fetchone()

        if row is None:
            logger.debug("Archiver not found", extra={"node_id": node_id})
            return None

        return ArchiverNode(
            node_id=row["nodeid"],
            node_name=row["nodename"],
            node_host=row["nodehost"],
        )

    def add_archiver(self, node_name: str | None, node_host: str) -> int:
        """Register a new archiver.

        The id is drawn from the archiver sequence and the row inserted in
        the same transaction. When node_name is None the row is named
        archiver_<id> by the INSERT itself, from the id it just drew.

        Args:
            node_name: Archiver name, or None for the default name
            node_host: Host address of the archiver

        Returns:
            The id assigned to the archiver

        Raises:
            InvalidArgumentError: If node_host is missing or not a string, or
                node_name is empty or not a string
            StorageFailureError: If the insert does not complete
        """
        if node_host is None:
            raise InvalidArgumentError("node_host is required", argument="node_host")
        if not isinstance(node_host, str):
            raise InvalidArgumentError(
                f"node_host must be a string, got {type(node_host).__name__}",
                argument="node_host",
            )
        if not node_host:
            raise InvalidArgumentError("node_host is required", argument="node_host")
        if node_name is not None and not isinstance(node_name, str):
            raise InvalidArgumentError(
                f"node_name must be a string or None, got {type(node_name).__name__}",
                argument="node_name",
            )
        if node_name is not None and not node_name:
            raise InvalidArgumentError("node_name must not be empty", argument="node_name")

        with self._storage_errors("insert into"), self._get_connection() as conn:
            with self._transaction(conn):
                cursor = conn.execute(
                    f"UPDATE {ARCHIVER_SEQUENCE} SET last_value = last_value + 1 WHERE name = ?",
                    (ARCHIVER_SEQUENCE,),
                )
                if cursor.rowcount != 1:
                    raise StorageFailureError(
                        f"sequence {ARCHIVER_SEQUENCE} is missing",
                        operation="insert into",
                        db_path=str(self.db_path),
                    )

                cursor = conn.execute(
                    f"""
                    INSERT INTO {ARCHIVER_TABLE} (nodeid, nodename, nodehost)
                    SELECT seq.last_value,
                           CASE WHEN :nodename IS NULL
                                THEN :prefix || seq.last_value
                                ELSE :nodename END,
                           :nodehost
                    FROM {ARCHIVER_SEQUENCE} AS seq
                    WHERE seq.name = :seq
                    RETURNING nodeid, nodename
                    """,
                    {
                        "nodename": node_name,
                        "nodehost": node_host,
                        "prefix": DEFAULT_NAME_PREFIX,
                        "seq": ARCHIVER_SEQUENCE,
                    },
                )
                rows = cursor.fetchall()
                if len(rows) != 1:
                    raise StorageFailureError(
                        f"could not insert into {ARCHIVER_TABLE}",
                        operation="insert into",
                        db_path=str(self.db_path),
                    )
                row = rows[0]

        logger.info(
            "Registered archiver",
            extra={"node_id": row["nodeid"], "node_name": row["nodename"], "node_host": node_host},
        )

        return row["nodeid"]

    def remove_archiver(self, node_id: int) -> None:
        """Remove an archiver by id.

        Dependent data is the caller's to clean up. The id is not returned
        to the sequence.

        Args:
            node_id: Archiver identifier

        Raises:
            InvalidArgumentError: If node_id is not an integer
            ArchiverNotFoundError: If no archiver has this id
            StorageFailureError: If the delete cannot run
        """
        node_id = _check_node_id(node_id)

        with self._storage_errors("delete from"), self._get_connection() as conn:
            with self._transaction(conn):
                cursor = conn.execute(
                    f"DELETE FROM {ARCHIVER_TABLE} WHERE nodeid = ?",
                    (_bindable_node_id(node_id),),
                )
                deleted = cursor.rowcount

        if deleted == 0:
            raise ArchiverNotFoundError(node_id)

        logger.info("Removed archiver", extra={"node_id": node_id})

    def list_archivers(self) -> list[ArchiverNode]:
        """Get all archivers ordered by id."""
        with self._storage_errors("select from"), self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT nodeid, nodename, nodehost FROM {ARCHIVER_TABLE} ORDER BY nodeid"
            )

            return [
                ArchiverNode(
                    node_id=row["nodeid"],
                    node_name=row["nodename"],
                    node_host=row["nodehost"],
                )
                for row in cursor.fetchall()
            ]

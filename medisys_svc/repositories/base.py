"""
Database handle and schema initialization.

The Database object owns exactly one SQLite connection. It is constructed
explicitly and passed to repositories; there is no module-level instance.

Lifecycle:
    db = Database(db_path="data/medisys.db")
    db.open()          # creates schema, optional - first use opens lazily
    ...
    db.close()         # idempotent

    # or scoped:
    with Database(db_path=path) as db:
        repo = PatientRepository(db)

If the connection was closed, the next access to Database.connection opens
a fresh one.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from core.config import DATABASE_PATH, DATABASE_BUSY_TIMEOUT
from core.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS patients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        birth_date TEXT NOT NULL,
        gender TEXT NOT NULL CHECK (gender IN ('M', 'W', 'D')),
        street TEXT,
        postal_code TEXT,
        city TEXT,
        phone TEXT,
        email TEXT,
        insurance_number TEXT NOT NULL,
        insurance_provider TEXT NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_patient_name
        ON patients (last_name, first_name)
    """,
    # Dependent relations: rows here block deletion of the referenced patient
    """
    CREATE TABLE IF NOT EXISTS appointments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        patient_id INTEGER NOT NULL,
        starts_at TEXT NOT NULL,
        reason TEXT,
        FOREIGN KEY (patient_id) REFERENCES patients(id) ON DELETE RESTRICT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        patient_id INTEGER NOT NULL,
        issued_on TEXT NOT NULL,
        amount_cents INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (patient_id) REFERENCES patients(id) ON DELETE RESTRICT
    )
    """,
)


class Database:
    """
    SQLite connection handle with an explicit open/close lifecycle.

    Features:
    - One connection per handle, opened lazily and reopened after close()
    - Foreign key constraints enabled on every connection
    - Busy timeout so a second process holding a lock is waited for
    - Schema created idempotently whenever a connection is opened

    The application handle is opened by main.lifespan and reaches
    request handlers through core.dependencies.get_database().
    """

    def __init__(self, db_path: Optional[str] = None, busy_timeout: Optional[int] = None):
        """
        Initialize the handle. No connection is opened yet.

        Args:
            db_path: Path to SQLite database file. Defaults to config DATABASE_PATH.
            busy_timeout: SQLite busy timeout in milliseconds. Defaults to config value.
        """
        self.db_path = db_path or DATABASE_PATH
        self.busy_timeout = busy_timeout if busy_timeout is not None else DATABASE_BUSY_TIMEOUT
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> sqlite3.Connection:
        """
        Open the connection if needed and make sure the schema exists.

        Returns:
            sqlite3.Connection: The live connection.

        Raises:
            DatabaseConnectionError: If the database cannot be opened or initialized.
        """
        if self._conn is not None:
            return self._conn

        conn = None
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            # Calls are sequential but may come from the ASGI worker thread
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._configure_connection(conn)
            self._init_schema(conn)
        except (sqlite3.Error, OSError) as e:
            if conn is not None:
                conn.close()
            logger.critical(f"Cannot open database {self.db_path}: {e}")
            raise DatabaseConnectionError(detail=f"Cannot open database {self.db_path}: {e}") from e

        self._conn = conn
        logger.info(
            f"Database connection opened: {self.db_path} "
            f"(busy_timeout={self.busy_timeout}ms)"
        )
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        """The live connection, reopened if it was closed."""
        return self.open()

    def close(self) -> None:
        """Close the connection. Calling close() on a closed handle is a no-op."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info(f"Database connection closed: {self.db_path}")

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout)}")
        conn.execute("PRAGMA foreign_keys = ON")

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        """Create tables and indexes if they don't exist yet."""
        with conn:
            for statement in SCHEMA:
                conn.execute(statement)

"""SQLite evidence ledger for a single hunt.

Each hunt directory holds one ledger file recording, for every encrypted
evidence payload, where the ciphertext lives and which nonce produced it.
Without the nonce the ciphertext cannot be decrypted, so rows are
append-only: the schema refuses updates and deletes on ``evidence``.
"""

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..utils.logging import get_logger
from ..vault.crypto import NONCE_SIZE
from ..vault.exceptions import LedgerError
from .models import CaseInfo, EvidenceRecord

logger = get_logger(__name__)

# Seconds a writer waits for another connection's lock before giving up
BUSY_TIMEOUT = 10.0

SCHEMA_SQL = """
-- Evidence: one immutable row per encrypted payload
CREATE TABLE IF NOT EXISTS evidence (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    description TEXT NOT NULL,
    file_path TEXT NOT NULL,
    nonce BLOB NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (file_path, nonce)
);

-- Info: singleton display metadata for the hunt
CREATE TABLE IF NOT EXISTS info (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    name TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    status TEXT NOT NULL DEFAULT 'active'
);

CREATE TRIGGER IF NOT EXISTS evidence_no_update
BEFORE UPDATE ON evidence
BEGIN
    SELECT RAISE(ABORT, 'evidence records are immutable');
END;

CREATE TRIGGER IF NOT EXISTS evidence_no_delete
BEFORE DELETE ON evidence
BEGIN
    SELECT RAISE(ABORT, 'evidence records are immutable');
END;
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class EvidenceLedger:
    """
    Evidence ledger backed by a SQLite database in WAL mode.

    One instance is the single writer for its file; writes on the shared
    connection are serialized by an internal lock, and other connections
    (readers, report tools) are not blocked by it.

    Usage:
        with EvidenceLedger.open(hunt_dir / "hunt.db") as ledger:
            evidence_id = ledger.insert_evidence("Phone dump", "evidence/a.enc", nonce)
    """

    def __init__(self, db_path: Path):
        """
        Initialize the ledger without touching disk.

        Args:
            db_path: Path to the ledger file
        """
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @classmethod
    def open(cls, db_path: Path, name: Optional[str] = None) -> "EvidenceLedger":
        """
        Open or create a ledger and make sure its schema exists.

        Safe to call repeatedly on the same file.

        Args:
            db_path: Path to the ledger file
            name: Hunt display name used if the info row is missing
                (default: name of the directory holding the ledger)

        Returns:
            Open EvidenceLedger
        """
        ledger = cls(db_path)
        try:
            ledger.create_schema(name or ledger.db_path.parent.name)
        except LedgerError:
            ledger.close()
            raise
        return ledger

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the database connection, creating if needed."""
        if self._conn is None:
            try:
                conn = sqlite3.connect(
                    str(self.db_path),
                    timeout=BUSY_TIMEOUT,
                    check_same_thread=False,
                )
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode = WAL")
                conn.execute("PRAGMA synchronous = FULL")
            except sqlite3.Error as e:
                raise LedgerError(f"Failed to open ledger {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "EvidenceLedger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def create_schema(self, name: str) -> None:
        """Create tables, triggers and the info row if they don't exist."""
        with self._lock:
            try:
                self.conn.executescript(SCHEMA_SQL)
                self.conn.execute(
                    "INSERT OR IGNORE INTO info (id, name, created_at, status) "
                    "VALUES (1, ?, ?, 'active')",
                    (name, _now()),
                )
                self.conn.commit()
            except sqlite3.Error as e:
                raise LedgerError(f"Failed to initialize ledger {self.db_path}: {e}") from e

    # ===================
    # Evidence
    # ===================

    def insert_evidence(self, description: str, file_path: str, nonce: bytes) -> int:
        """
        Append one evidence record.

        The row is committed before this returns.

        Args:
            description: Human description of the item
            file_path: Ciphertext location relative to the hunt root
            nonce: Nonce that produced the ciphertext

        Returns:
            Ledger-assigned evidence ID

        Raises:
            ValueError: If the nonce has the wrong length
            LedgerError: If the (file_path, nonce) pair already exists or
                the write fails
        """
        if len(nonce) != NONCE_SIZE:
            raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")

        with self._lock:
            try:
                cursor = self.conn.execute(
                    "INSERT INTO evidence (description, file_path, nonce, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (description, file_path, bytes(nonce), _now()),
                )
                self.conn.commit()
            except sqlite3.IntegrityError as e:
                self.conn.rollback()
                raise LedgerError(f"Evidence record already exists for {file_path}: {e}") from e
            except sqlite3.Error as e:
                self.conn.rollback()
                raise LedgerError(f"Failed to insert evidence: {e}") from e

        evidence_id = cursor.lastrowid
        logger.debug(f"Recorded evidence {evidence_id} at {file_path}")
        return evidence_id

    def get_evidence(self, evidence_id: int) -> Optional[EvidenceRecord]:
        """Get a single evidence record by ID."""
        row = self._fetchone("SELECT * FROM evidence WHERE id = ?", (evidence_id,))
        return EvidenceRecord.from_row(row) if row else None

    def list_evidence(self) -> list[EvidenceRecord]:
        """Get all evidence records in insertion order."""
        rows = self._fetchall("SELECT * FROM evidence ORDER BY id")
        return [EvidenceRecord.from_row(row) for row in rows]

    def evidence_count(self) -> int:
        """Get total number of evidence records."""
        return self._fetchone("SELECT COUNT(*) FROM evidence")[0]

    # ===================
    # Case info
    # ===================

    def get_info(self) -> CaseInfo:
        """Get the hunt's display metadata."""
        row = self._fetchone("SELECT name, created_at, status FROM info WHERE id = 1")
        if row is None:
            raise LedgerError(f"Ledger has no case info: {self.db_path}")
        return CaseInfo.from_row(row)

    def rename_case(self, new_name: str) -> None:
        """
        Change the hunt's display name.

        Only the name column of the info row is touched.
        """
        if not new_name or not new_name.strip():
            raise ValueError("Hunt name must not be empty")

        with self._lock:
            try:
                cursor = self.conn.execute(
                    "UPDATE info SET name = ? WHERE id = 1", (new_name.strip(),)
                )
                self.conn.commit()
            except sqlite3.Error as e:
                self.conn.rollback()
                raise LedgerError(f"Failed to rename hunt: {e}") from e

        if cursor.rowcount == 0:
            raise LedgerError(f"Ledger has no case info: {self.db_path}")

    # ===================
    # Maintenance
    # ===================

    def checkpoint(self) -> None:
        """Fold the write-ahead log back into the main database file."""
        with self._lock:
            try:
                self.conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
            except sqlite3.Error as e:
                raise LedgerError(f"Failed to checkpoint ledger: {e}") from e

    def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            try:
                return self.conn.execute(query, params).fetchone()
            except sqlite3.Error as e:
                raise LedgerError(f"Ledger query failed: {e}") from e

    def _fetchall(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self.conn.execute(query, params).fetchall()
            except sqlite3.Error as e:
                raise LedgerError(f"Ledger query failed: {e}") from e

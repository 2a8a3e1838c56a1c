"""Data models for the evidence ledger."""

import sqlite3
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EvidenceRecord:
    """One encrypted evidence item as recorded in the ledger."""

    id: int
    description: str
    file_path: str  # Relative to the hunt root, POSIX separators
    nonce: bytes
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "description": self.description,
            "file_path": self.file_path,
            "nonce": self.nonce.hex(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "EvidenceRecord":
        """Create from a database row."""
        return cls(
            id=row["id"],
            description=row["description"],
            file_path=row["file_path"],
            nonce=bytes(row["nonce"]),
            created_at=row["created_at"],
        )


@dataclass(frozen=True)
class CaseInfo:
    """Display metadata for a hunt (the ledger's singleton info row)."""

    name: str
    created_at: str
    status: str = "active"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "created_at": self.created_at,
            "status": self.status,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "CaseInfo":
        """Create from a database row."""
        return cls(
            name=row["name"],
            created_at=row["created_at"],
            status=row["status"],
        )

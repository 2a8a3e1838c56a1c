"""Hunt management: creating cases and moving evidence in and out of them.

A hunt lives at ``<data_dir>/hunts/<hunt_id>/`` and contains an
``evidence/`` directory of ciphertext files plus the ledger that records
the nonce for each of them.
"""

import re
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..bundle import ImportResult, export_hunt, import_hunt, resolve_entry_path
from ..ledger import EvidenceLedger, EvidenceRecord
from ..utils.logging import get_logger
from ..vault.config import VaultConfig, get_vault_config
from ..vault.crypto import decrypt_file, encrypt_data
from ..vault.exceptions import (
    CaseAlreadyExistsError,
    CaseNotFoundError,
    EvidenceNotFoundError,
    LedgerError,
    VaultIOError,
    VaultLockedError,
)
from ..vault.session import SessionKeyStore, get_key_store

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass
class HuntSummary:
    """Listing entry for a hunt."""

    id: str
    name: str
    created_at: str
    status: str
    evidence_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "status": self.status,
            "evidence_count": self.evidence_count,
        }


class HuntManager:
    """
    Manages hunts under the configured data directory.

    Usage:
        vm = VaultManager()
        vm.unlock(password)

        hunts = HuntManager(store=vm.store)
        hunt_id = hunts.create_hunt("Operation X")
        record = hunts.add_evidence(hunt_id, b"...", "Phone extraction")
        data = hunts.read_evidence(hunt_id, record.id)
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        store: Optional[SessionKeyStore] = None,
    ):
        """
        Initialize hunt manager.

        Args:
            config: Vault configuration (uses global if not provided)
            store: Session key store (uses the process default if not provided)
        """
        self.config = config or get_vault_config()
        self.store = store or get_key_store()

    @property
    def hunts_root(self) -> Path:
        """Directory holding all hunts."""
        return self.config.hunts_dir

    def hunt_dir(self, hunt_id: str) -> Path:
        """
        Get the directory of an existing hunt.

        Raises:
            CaseNotFoundError: If the ID is not a plain name or the hunt is missing
        """
        if (
            not hunt_id
            or hunt_id in (".", "..")
            or "/" in hunt_id
            or "\\" in hunt_id
        ):
            raise CaseNotFoundError(hunt_id)

        path = self.hunts_root / hunt_id
        if not path.is_dir():
            raise CaseNotFoundError(hunt_id)
        return path

    def ledger_path(self, hunt_id: str) -> Path:
        """Path to a hunt's ledger file."""
        return self.hunt_dir(hunt_id) / self.config.ledger_filename

    def open_ledger(self, hunt_id: str) -> EvidenceLedger:
        """Open the ledger of an existing hunt."""
        return EvidenceLedger.open(self.ledger_path(hunt_id))

    # ===================
    # Hunts
    # ===================

    def create_hunt(self, name: str) -> str:
        """
        Create a new, empty hunt.

        Either the hunt directory, its evidence directory and its ledger all
        exist afterwards, or nothing new is left on disk.

        Args:
            name: Display name

        Returns:
            Generated hunt ID

        Raises:
            VaultLockedError: If the vault is locked
            ValueError: If the name is empty
        """
        if self.store.is_locked:
            raise VaultLockedError()

        if not name or not name.strip():
            raise ValueError("Hunt name must not be empty")

        hunt_id = uuid.uuid4().hex
        hunt_dir = self.hunts_root / hunt_id

        try:
            self.hunts_root.mkdir(parents=True, exist_ok=True)
            hunt_dir.mkdir()
        except FileExistsError as e:
            raise CaseAlreadyExistsError(hunt_id) from e
        except OSError as e:
            raise VaultIOError(f"Failed to create hunt directory {hunt_dir}: {e}") from e

        try:
            (hunt_dir / self.config.evidence_dirname).mkdir()
            ledger = EvidenceLedger.open(
                hunt_dir / self.config.ledger_filename, name=name.strip()
            )
            ledger.close()
        except OSError as e:
            shutil.rmtree(hunt_dir, ignore_errors=True)
            raise VaultIOError(f"Failed to initialize hunt {hunt_id}: {e}") from e
        except BaseException:
            shutil.rmtree(hunt_dir, ignore_errors=True)
            raise

        logger.info(f"Created hunt {hunt_id} ({name.strip()})")
        return hunt_id

    def get_hunt(self, hunt_id: str) -> HuntSummary:
        """Get listing metadata for a single hunt."""
        with self.open_ledger(hunt_id) as ledger:
            info = ledger.get_info()
            count = ledger.evidence_count()
        return HuntSummary(
            id=hunt_id,
            name=info.name,
            created_at=info.created_at,
            status=info.status,
            evidence_count=count,
        )

    def list_hunts(self) -> list[HuntSummary]:
        """
        List all hunts, oldest first.

        Directories without a readable ledger are reported in the log and
        left out of the listing.
        """
        if not self.hunts_root.exists():
            return []

        hunts = []
        for entry in sorted(self.hunts_root.iterdir()):
            if not entry.is_dir():
                continue
            if not (entry / self.config.ledger_filename).exists():
                logger.warning(f"Skipping {entry.name}: no ledger")
                continue
            try:
                hunts.append(self.get_hunt(entry.name))
            except LedgerError as e:
                logger.warning(f"Skipping {entry.name}: {e}")

        hunts.sort(key=lambda h: (h.created_at or "", h.id))
        return hunts

    def rename_hunt(self, hunt_id: str, new_name: str) -> None:
        """Change a hunt's display name."""
        with self.open_ledger(hunt_id) as ledger:
            ledger.rename_case(new_name)
        logger.info(f"Renamed hunt {hunt_id} to {new_name.strip()}")

    # ===================
    # Evidence
    # ===================

    def add_evidence(
        self,
        hunt_id: str,
        data: bytes,
        description: str,
        filename: Optional[str] = None,
    ) -> EvidenceRecord:
        """
        Encrypt a payload into a hunt and record it in the ledger.

        Args:
            hunt_id: Target hunt
            data: Plaintext evidence
            description: Human description for the ledger
            filename: Optional original file name, used to name the ciphertext

        Returns:
            The new EvidenceRecord

        Raises:
            VaultLockedError: If the vault is locked
        """
        hunt_dir = self.hunt_dir(hunt_id)

        with self.store.require_key() as key:
            ciphertext, nonce = encrypt_data(data, key)

        evidence_dir = hunt_dir / self.config.evidence_dirname
        stored_path = self._new_evidence_path(evidence_dir, filename)
        relative_path = stored_path.relative_to(hunt_dir).as_posix()

        try:
            evidence_dir.mkdir(exist_ok=True)
            with open(stored_path, "xb") as f:
                f.write(ciphertext)
        except OSError as e:
            raise VaultIOError(f"Failed to write evidence {stored_path}: {e}") from e

        try:
            with self.open_ledger(hunt_id) as ledger:
                evidence_id = ledger.insert_evidence(description, relative_path, nonce)
                record = ledger.get_evidence(evidence_id)
        except BaseException:
            stored_path.unlink(missing_ok=True)
            raise

        logger.info(f"Added evidence {evidence_id} to hunt {hunt_id}")
        return record

    def add_evidence_file(
        self,
        hunt_id: str,
        source_path: Path,
        description: Optional[str] = None,
    ) -> EvidenceRecord:
        """Encrypt a file from disk into a hunt."""
        source_path = Path(source_path)
        try:
            data = source_path.read_bytes()
        except OSError as e:
            raise VaultIOError(f"Failed to read {source_path}: {e}") from e

        return self.add_evidence(
            hunt_id,
            data,
            description or source_path.name,
            filename=source_path.name,
        )

    def list_evidence(self, hunt_id: str) -> list[EvidenceRecord]:
        """List a hunt's evidence records."""
        with self.open_ledger(hunt_id) as ledger:
            return ledger.list_evidence()

    def read_evidence(self, hunt_id: str, evidence_id: int) -> bytes:
        """
        Decrypt one evidence item.

        Raises:
            VaultLockedError: If the vault is locked
            EvidenceNotFoundError: If the ledger has no such record
            PathTraversalError: If the recorded path points outside the hunt
            DecryptionError: If the key or data is wrong
        """
        key = self.store.require_key()
        with key:
            hunt_dir = self.hunt_dir(hunt_id)
            with self.open_ledger(hunt_id) as ledger:
                record = ledger.get_evidence(evidence_id)
            if record is None:
                raise EvidenceNotFoundError(evidence_id)

            stored_path = resolve_entry_path(hunt_dir, record.file_path)
            return decrypt_file(stored_path, record.nonce, key)

    def _new_evidence_path(self, evidence_dir: Path, filename: Optional[str]) -> Path:
        token = uuid.uuid4().hex
        stem = _UNSAFE_CHARS.sub("_", Path(filename).stem).strip("._") if filename else ""
        if not stem:
            stem = token

        path = evidence_dir / f"{stem}{self.config.encrypted_extension}"
        if path.exists():
            path = evidence_dir / f"{stem}-{token[:8]}{self.config.encrypted_extension}"
        return path

    # ===================
    # Bundles
    # ===================

    def export_hunt(self, hunt_id: str, output_path: Path) -> int:
        """
        Export a hunt as a bundle.

        The ledger's write-ahead log is checkpointed first so the archived
        ledger file is self-contained.

        Returns:
            Number of archive entries written
        """
        hunt_dir = self.hunt_dir(hunt_id)
        if (hunt_dir / self.config.ledger_filename).exists():
            with self.open_ledger(hunt_id) as ledger:
                ledger.checkpoint()
        return export_hunt(hunt_dir, output_path)

    def import_hunt(self, archive_path: Path, show_progress: bool = False) -> ImportResult:
        """
        Import a bundle as a new hunt named after the archive file.

        Raises:
            CaseAlreadyExistsError: If a hunt with that ID exists
        """
        result = import_hunt(archive_path, self.hunts_root, show_progress=show_progress)
        if not (result.case_dir / self.config.ledger_filename).exists():
            logger.warning(f"Imported hunt {result.case_id} has no ledger file")
        return result


def get_hunt_manager() -> HuntManager:
    """Get a hunt manager using the global configuration and key store."""
    return HuntManager()

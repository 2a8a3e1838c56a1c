"""Shared pytest fixtures for Open Season tests."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_vault(tmp_path: Path, monkeypatch):
    """Point the global configuration at a temp directory and reset global state."""
    from open_season.vault.config import set_vault_config
    from open_season.vault.session import reset_key_store

    monkeypatch.setenv("OPEN_SEASON_HOME", str(tmp_path / "home"))
    # Cheap Argon2 parameters keep the suite fast
    monkeypatch.setenv("VAULT_ARGON2_TIME_COST", "1")
    monkeypatch.setenv("VAULT_ARGON2_MEMORY_COST", "1024")
    monkeypatch.setenv("VAULT_ARGON2_PARALLELISM", "1")
    set_vault_config(None)
    reset_key_store()

    yield

    reset_key_store()
    set_vault_config(None)


@pytest.fixture
def vault_config(tmp_path: Path):
    """Vault configuration rooted in a temp directory with fast Argon2 parameters."""
    from open_season.vault.config import VaultConfig

    return VaultConfig(
        data_dir=tmp_path / "vault",
        argon2_time_cost=1,
        argon2_memory_cost=1024,
        argon2_parallelism=1,
    )


@pytest.fixture
def key_store():
    """A fresh, locked session key store."""
    from open_season.vault.session import SessionKeyStore

    return SessionKeyStore()


@pytest.fixture
def salt() -> str:
    """A freshly generated salt."""
    from open_season.vault.kdf import generate_salt

    return generate_salt()


@pytest.fixture
def session_key(vault_config, salt):
    """A session key derived from a fixed password."""
    from open_season.vault.kdf import derive_key

    return derive_key("correct horse", salt, vault_config)


@pytest.fixture
def unlocked_vault(vault_config, key_store):
    """A VaultManager that has been unlocked with a fixed password."""
    from open_season.vault.vault_manager import VaultManager

    vm = VaultManager(config=vault_config, store=key_store)
    vm.unlock("correct horse")
    return vm


@pytest.fixture
def hunt_manager(vault_config, unlocked_vault):
    """HuntManager sharing the unlocked vault's key store."""
    from open_season.hunts import HuntManager

    return HuntManager(config=vault_config, store=unlocked_vault.store)


@pytest.fixture
def sample_hunt(hunt_manager):
    """A hunt with two evidence items; returns (hunt_id, records)."""
    hunt_id = hunt_manager.create_hunt("case-A")
    records = [
        hunt_manager.add_evidence(hunt_id, b"hello world", "Field notes", filename="notes.txt"),
        hunt_manager.add_evidence(hunt_id, b"\x00\x01binary\xff", "Phone extraction"),
    ]
    return hunt_id, records


@pytest.fixture
def sample_hunt_dir(tmp_path: Path) -> Path:
    """
    A hand-built hunt directory: ledger with one row plus evidence/notes.enc.
    """
    from open_season.ledger import EvidenceLedger

    hunt_dir = tmp_path / "case-A"
    evidence_dir = hunt_dir / "evidence"
    evidence_dir.mkdir(parents=True)
    (evidence_dir / "notes.enc").write_bytes(b"ciphertext-bytes" * 8)

    with EvidenceLedger.open(hunt_dir / "hunt.db", name="case-A") as ledger:
        ledger.insert_evidence("Notes", "evidence/notes.enc", b"\x07" * 24)
        ledger.checkpoint()

    return hunt_dir

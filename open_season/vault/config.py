"""Vault configuration for the Open Season evidence vault."""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class VaultConfig:
    """Configuration for vault storage and key derivation."""

    # Storage layout
    data_dir: Path = field(default_factory=lambda: Path.home() / ".open-season")
    salt_filename: str = "vault.salt"
    hunts_dirname: str = "hunts"
    ledger_filename: str = "hunt.db"
    evidence_dirname: str = "evidence"

    # File naming
    encrypted_extension: str = ".enc"
    bundle_extension: str = ".osb"

    # Argon2id parameters (argon2 crate defaults, so existing vaults keep unlocking)
    argon2_time_cost: int = 2
    argon2_memory_cost: int = 19456  # KiB
    argon2_parallelism: int = 1
    key_size: int = 32

    @property
    def salt_path(self) -> Path:
        """Path to the persisted salt file."""
        return self.data_dir / self.salt_filename

    @property
    def hunts_dir(self) -> Path:
        """Directory holding one sub-directory per hunt."""
        return self.data_dir / self.hunts_dirname

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            OPEN_SEASON_HOME: Data directory (default: ~/.open-season)
            VAULT_ARGON2_TIME_COST: Argon2 iterations (default: 2)
            VAULT_ARGON2_MEMORY_COST: Argon2 memory in KiB (default: 19456)
            VAULT_ARGON2_PARALLELISM: Argon2 lanes (default: 1)
        """
        config = cls()

        if home := os.getenv("OPEN_SEASON_HOME"):
            config.data_dir = Path(home).expanduser()

        if time_cost := os.getenv("VAULT_ARGON2_TIME_COST"):
            config.argon2_time_cost = int(time_cost)

        if memory_cost := os.getenv("VAULT_ARGON2_MEMORY_COST"):
            config.argon2_memory_cost = int(memory_cost)

        if parallelism := os.getenv("VAULT_ARGON2_PARALLELISM"):
            config.argon2_parallelism = int(parallelism)

        return config


# Global configuration instance
_config: VaultConfig | None = None


def get_vault_config() -> VaultConfig:
    """Get the global vault configuration."""
    global _config
    if _config is None:
        _config = VaultConfig.from_env()
    return _config


def set_vault_config(config: VaultConfig | None) -> None:
    """Set the global vault configuration (None reloads from the environment)."""
    global _config
    _config = config

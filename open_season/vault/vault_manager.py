"""Vault manager for unlocking and locking the vault.

Ties the salt file, key derivation and the session key store together.
"""

from pathlib import Path
from typing import Optional

from ..utils.logging import get_logger
from .config import VaultConfig, get_vault_config
from .kdf import derive_key
from .salt import load_or_create_salt
from .session import SessionKeyStore, get_key_store

logger = get_logger(__name__)


class VaultManager:
    """
    Manages the vault session for this installation.

    Usage:
        vm = VaultManager()
        vm.unlock(password)
        ...
        vm.lock()

    No password verifier is stored next to the salt. A wrong password
    unlocks a session whose key fails every decryption with DecryptionError.
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        store: Optional[SessionKeyStore] = None,
    ):
        """
        Initialize the vault manager.

        Args:
            config: Vault configuration (uses global if not provided)
            store: Session key store (uses the process default if not provided)
        """
        self.config = config or get_vault_config()
        self.store = store or get_key_store()

    @property
    def salt_path(self) -> Path:
        """Path to the installation salt file."""
        return self.config.salt_path

    @property
    def is_locked(self) -> bool:
        """True when no session key is loaded."""
        return self.store.is_locked

    def get_salt(self) -> str:
        """Return the installation salt, creating it on first use."""
        return load_or_create_salt(self.salt_path)

    def unlock(self, password: str) -> None:
        """
        Derive the session key from ``password`` and load it.

        Any previously loaded key is wiped.

        Raises:
            InvalidSaltError: If the salt file is malformed
            KeyDerivationError: If key derivation fails
            VaultIOError: If the salt file cannot be read or created
        """
        salt = self.get_salt()
        key = derive_key(password, salt, self.config)
        self.store.set_key(key)
        logger.info("Vault unlocked")

    def lock(self) -> bool:
        """
        Wipe the session key.

        Returns:
            True if a key was loaded
        """
        cleared = self.store.clear_key()
        if cleared:
            logger.info("Vault locked")
        return cleared


def get_vault_manager() -> VaultManager:
    """Get a vault manager using the global configuration and key store."""
    return VaultManager()

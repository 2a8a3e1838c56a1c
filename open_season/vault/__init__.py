"""Vault encryption module for Open Season.

Provides Argon2id key derivation, an in-memory session key store and
XChaCha20-Poly1305 authenticated encryption for hunt evidence.

Usage:
    from open_season.vault import VaultManager, encrypt_data, decrypt_data

    vm = VaultManager()
    vm.unlock(password)

    with vm.store.require_key() as key:
        ciphertext, nonce = encrypt_data(b"evidence", key)
        plaintext = decrypt_data(ciphertext, nonce, key)

    vm.lock()
"""

# Exceptions
from .exceptions import (
    BundleEncodingError,
    BundleError,
    CaseAlreadyExistsError,
    CaseNotFoundError,
    DecryptionError,
    EncryptionError,
    EvidenceNotFoundError,
    InvalidSaltError,
    KeyDerivationError,
    LedgerError,
    PathTraversalError,
    VaultError,
    VaultIOError,
    VaultLockedError,
)

# Configuration
from .config import (
    VaultConfig,
    get_vault_config,
    set_vault_config,
)

# Session management
from .session import (
    SessionKey,
    SessionKeyStore,
    get_key_store,
    is_vault_unlocked,
    reset_key_store,
)

# Key derivation
from .kdf import derive_key, generate_salt, validate_salt
from .salt import load_or_create_salt, read_salt, write_salt

# Encryption
from .crypto import (
    NONCE_SIZE,
    decrypt_data,
    decrypt_file,
    encrypt_data,
    encrypt_file,
)

# Vault operations
from .vault_manager import VaultManager, get_vault_manager

__all__ = [
    # Exceptions
    "VaultError",
    "VaultLockedError",
    "InvalidSaltError",
    "KeyDerivationError",
    "DecryptionError",
    "EncryptionError",
    "VaultIOError",
    "CaseAlreadyExistsError",
    "CaseNotFoundError",
    "EvidenceNotFoundError",
    "LedgerError",
    "BundleError",
    "BundleEncodingError",
    "PathTraversalError",
    # Configuration
    "VaultConfig",
    "get_vault_config",
    "set_vault_config",
    # Session
    "SessionKey",
    "SessionKeyStore",
    "get_key_store",
    "reset_key_store",
    "is_vault_unlocked",
    # Key derivation
    "derive_key",
    "generate_salt",
    "validate_salt",
    "load_or_create_salt",
    "read_salt",
    "write_salt",
    # Encryption
    "NONCE_SIZE",
    "encrypt_data",
    "decrypt_data",
    "encrypt_file",
    "decrypt_file",
    # Vault manager
    "VaultManager",
    "get_vault_manager",
]

"""Password-based key derivation for the vault.

Session keys are derived with Argon2id from the master password and the
installation salt. The salt is kept as text (unpadded standard base64, the
PHC salt encoding) and its ASCII bytes are what Argon2 hashes, so the same
password and salt file always yield the same key.
"""

import base64
import os
import re
from typing import Optional

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

from .config import VaultConfig, get_vault_config
from .exceptions import InvalidSaltError, KeyDerivationError
from .session import SessionKey

SALT_BYTES = 16
SALT_MIN_LENGTH = 4
SALT_MAX_LENGTH = 64

_SALT_PATTERN = re.compile(r"^[A-Za-z0-9+/]+$")


def generate_salt(length: int = SALT_BYTES) -> str:
    """Return a fresh random salt encoded as unpadded base64 text."""
    return base64.b64encode(os.urandom(length)).decode("ascii").rstrip("=")


def validate_salt(salt: str) -> str:
    """
    Check that a salt string is well formed.

    Args:
        salt: Salt text as stored on disk

    Returns:
        The salt, unchanged

    Raises:
        InvalidSaltError: If the salt has the wrong length or alphabet
    """
    if not isinstance(salt, str):
        raise InvalidSaltError("Salt must be text.")
    if not SALT_MIN_LENGTH <= len(salt) <= SALT_MAX_LENGTH:
        raise InvalidSaltError(
            f"Salt must be {SALT_MIN_LENGTH}-{SALT_MAX_LENGTH} characters, got {len(salt)}."
        )
    if not _SALT_PATTERN.match(salt):
        raise InvalidSaltError("Salt contains characters outside the base64 alphabet.")
    return salt


def derive_key(
    password: str,
    salt: str,
    config: Optional[VaultConfig] = None,
) -> SessionKey:
    """
    Derive the 32-byte session key from a password using Argon2id.

    Args:
        password: Master password
        salt: Installation salt (see :func:`generate_salt`)
        config: Vault configuration for cost parameters (global if omitted)

    Returns:
        SessionKey holding the derived material

    Raises:
        InvalidSaltError: If the salt is malformed
        KeyDerivationError: If Argon2 rejects the parameters
    """
    config = config or get_vault_config()
    validate_salt(salt)

    try:
        raw = hash_secret_raw(
            secret=password.encode("utf-8"),
            salt=salt.encode("ascii"),
            time_cost=config.argon2_time_cost,
            memory_cost=config.argon2_memory_cost,
            parallelism=config.argon2_parallelism,
            hash_len=config.key_size,
            type=Type.ID,
        )
    except (HashingError, OverflowError) as e:
        raise KeyDerivationError(f"Argon2id key derivation failed: {e}") from e

    return SessionKey(raw)

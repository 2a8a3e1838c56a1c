"""Persistence of the installation salt.

The salt is not secret and lives in cleartext next to the hunts. It is
created once, lazily, the first time the vault is unlocked; after that it
must never change, or every key derived from it is lost.
"""

import os
import tempfile
from pathlib import Path

from ..utils.logging import get_logger
from .exceptions import InvalidSaltError, VaultIOError
from .kdf import generate_salt, validate_salt

logger = get_logger(__name__)


def read_salt(path: Path) -> str:
    """
    Read and validate the salt stored at ``path``.

    Raises:
        InvalidSaltError: If the file is empty or malformed
        VaultIOError: If the file cannot be read
    """
    try:
        content = Path(path).read_text(encoding="ascii").strip()
    except UnicodeDecodeError as e:
        raise InvalidSaltError(f"Salt file is not ASCII text: {path}") from e
    except OSError as e:
        raise VaultIOError(f"Failed to read salt file {path}: {e}") from e

    if not content:
        raise InvalidSaltError(f"Salt file is empty: {path}")
    return validate_salt(content)


def write_salt(path: Path, salt: str) -> str:
    """
    Atomically persist ``salt`` at ``path`` unless a salt is already there.

    The salt is written to a temporary file in the same directory and then
    hard-linked into place, so readers never see a half-written file and a
    concurrent creator cannot replace an existing salt.

    Returns:
        The salt now stored at ``path`` (the existing one if we lost a race)
    """
    path = Path(path)
    validate_salt(salt)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".salt-", dir=path.parent)
    except OSError as e:
        raise VaultIOError(f"Failed to prepare salt file {path}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="ascii") as f:
            f.write(salt + "\n")
            f.flush()
            os.fsync(f.fileno())
        try:
            os.link(tmp_path, path)
        except FileExistsError:
            logger.debug(f"Salt file appeared concurrently at {path}; using it")
            return read_salt(path)
    except OSError as e:
        raise VaultIOError(f"Failed to write salt file {path}: {e}") from e
    finally:
        tmp_path.unlink(missing_ok=True)

    logger.info(f"Created vault salt at {path}")
    return salt


def load_or_create_salt(path: Path) -> str:
    """
    Return the installation salt, creating it on first use.

    Args:
        path: Location of the salt file

    Returns:
        Salt text

    Raises:
        InvalidSaltError: If an existing salt file is malformed
        VaultIOError: If the file cannot be read or created
    """
    path = Path(path)
    if path.exists():
        return read_salt(path)
    return write_salt(path, generate_salt())

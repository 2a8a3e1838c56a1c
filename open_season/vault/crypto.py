"""Core cryptographic primitives for evidence encryption.

Uses PyNaCl (libsodium) XChaCha20-Poly1305 in its IETF AEAD form:
- 256-bit key (the session key)
- 192-bit random nonce per message, returned to the caller for the ledger
- 128-bit Poly1305 tag appended to the ciphertext

The nonce is large enough that drawing it at random for every call is safe
without any counter state, so nothing here needs to survive a restart.
"""

from pathlib import Path

from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_ABYTES,
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
    crypto_aead_xchacha20poly1305_ietf_NPUBBYTES,
)
from nacl.exceptions import CryptoError
from nacl.utils import random as random_bytes

from .exceptions import DecryptionError, EncryptionError, VaultIOError
from .session import SessionKey

NONCE_SIZE = crypto_aead_xchacha20poly1305_ietf_NPUBBYTES  # 24 bytes
TAG_SIZE = crypto_aead_xchacha20poly1305_ietf_ABYTES  # 16 bytes


def generate_nonce() -> bytes:
    """Generate a fresh random 24-byte nonce."""
    return random_bytes(NONCE_SIZE)


def encrypt_data(plaintext: bytes, key: SessionKey) -> tuple[bytes, bytes]:
    """
    Encrypt a payload under the session key.

    Args:
        plaintext: Data to encrypt
        key: Live session key

    Returns:
        Tuple of (ciphertext with tag, nonce)
    """
    nonce = generate_nonce()
    try:
        ciphertext = crypto_aead_xchacha20poly1305_ietf_encrypt(
            bytes(plaintext), None, nonce, bytes(key)
        )
    except CryptoError as e:
        raise EncryptionError(f"XChaCha20-Poly1305 encryption failed: {e}") from e
    return ciphertext, nonce


def decrypt_data(ciphertext: bytes, nonce: bytes, key: SessionKey) -> bytes:
    """
    Decrypt and authenticate a payload.

    Args:
        ciphertext: Ciphertext with appended tag
        nonce: The nonce returned by :func:`encrypt_data`
        key: Live session key

    Returns:
        Original plaintext

    Raises:
        DecryptionError: On any authentication failure (wrong key, wrong
            nonce, or modified ciphertext)
    """
    if len(nonce) != NONCE_SIZE or len(ciphertext) < TAG_SIZE:
        raise DecryptionError()
    try:
        return crypto_aead_xchacha20poly1305_ietf_decrypt(
            bytes(ciphertext), None, bytes(nonce), bytes(key)
        )
    except CryptoError:
        raise DecryptionError() from None


def encrypt_file(source_path: Path, dest_path: Path, key: SessionKey) -> bytes:
    """
    Encrypt a file to disk.

    Args:
        source_path: Plaintext file
        dest_path: Destination for the ciphertext
        key: Live session key

    Returns:
        Nonce used for this file
    """
    try:
        plaintext = Path(source_path).read_bytes()
    except OSError as e:
        raise VaultIOError(f"Failed to read {source_path}: {e}") from e

    ciphertext, nonce = encrypt_data(plaintext, key)

    try:
        Path(dest_path).write_bytes(ciphertext)
    except OSError as e:
        raise VaultIOError(f"Failed to write {dest_path}: {e}") from e
    return nonce


def decrypt_file(source_path: Path, nonce: bytes, key: SessionKey) -> bytes:
    """
    Decrypt a file into memory.

    Args:
        source_path: Ciphertext file
        nonce: Nonce recorded for the file
        key: Live session key

    Returns:
        Decrypted content
    """
    try:
        ciphertext = Path(source_path).read_bytes()
    except OSError as e:
        raise VaultIOError(f"Failed to read {source_path}: {e}") from e
    return decrypt_data(ciphertext, nonce, key)

"""Vault exceptions for the Open Season evidence vault."""


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class VaultLockedError(VaultError):
    """Raised when an operation needs the session key but the vault is locked."""

    def __init__(self, message: str = "Vault is locked. Unlock with password first."):
        super().__init__(message)


class InvalidSaltError(VaultError):
    """Raised when the persisted salt string is malformed."""

    def __init__(self, message: str = "Invalid vault salt."):
        super().__init__(message)


class KeyDerivationError(VaultError):
    """Raised when the password hashing primitive fails."""

    def __init__(self, message: str = "Key derivation failed."):
        super().__init__(message)


class DecryptionError(VaultError):
    """Raised when decryption fails.

    The message never says whether the key, the nonce or the ciphertext
    was at fault.
    """

    def __init__(self, message: str = "Decryption failed: wrong key or corrupted data."):
        super().__init__(message)


class EncryptionError(VaultError):
    """Raised when encryption fails."""

    def __init__(self, message: str = "Failed to encrypt data."):
        super().__init__(message)


class VaultIOError(VaultError):
    """Raised when a filesystem operation fails."""

    pass


class CaseAlreadyExistsError(VaultError):
    """Raised when creating or importing a hunt whose directory already exists."""

    def __init__(self, case_id: str = ""):
        message = f"Hunt already exists: {case_id}" if case_id else "Hunt already exists."
        super().__init__(message)


class CaseNotFoundError(VaultError):
    """Raised when a hunt directory is not found."""

    def __init__(self, case_id: str = ""):
        message = f"Hunt not found: {case_id}" if case_id else "Hunt not found."
        super().__init__(message)


class EvidenceNotFoundError(VaultError):
    """Raised when an evidence record is not in the ledger."""

    def __init__(self, evidence_id=None):
        if evidence_id is not None:
            message = f"Evidence not found: {evidence_id}"
        else:
            message = "Evidence not found."
        super().__init__(message)


class LedgerError(VaultError):
    """Raised when the evidence ledger cannot be read or written."""

    pass


class BundleError(VaultError):
    """Raised when a case bundle is malformed or cannot be imported."""

    pass


class BundleEncodingError(BundleError):
    """Raised when a path inside a hunt is not representable as portable text."""

    pass


class PathTraversalError(BundleError):
    """Raised when an archive entry would resolve outside the destination."""

    def __init__(self, entry_name: str = ""):
        message = (
            f"Archive entry escapes destination: {entry_name!r}"
            if entry_name
            else "Archive entry escapes destination."
        )
        super().__init__(message)
        self.entry_name = entry_name

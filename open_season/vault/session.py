"""Session key management for the vault.

Holds the single live session key for the process so the password only has
to be entered once per session. The key is kept in a mutable buffer that is
overwritten with zeros whenever it is replaced, cleared, or the interpreter
exits.
"""

import atexit
import hmac
import threading
from typing import Optional

from .exceptions import VaultLockedError

KEY_SIZE = 32


class SessionKey:
    """
    32 bytes of symmetric key material that can be wiped in place.

    Usable as a context manager: the instance is zeroed on exit, which is how
    consumers dispose of the copies handed out by :class:`SessionKeyStore`.
    """

    __slots__ = ("_material", "_wiped")

    def __init__(self, material: bytes):
        if len(material) != KEY_SIZE:
            raise ValueError(f"Session key must be {KEY_SIZE} bytes, got {len(material)}")
        self._material = bytearray(material)
        self._wiped = False

    def __bytes__(self) -> bytes:
        if self._wiped:
            raise VaultLockedError("Session key has been cleared.")
        return bytes(self._material)

    def __len__(self) -> int:
        return len(self._material)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SessionKey):
            return NotImplemented
        return hmac.compare_digest(self._material, other._material)

    __hash__ = None

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "live"
        return f"SessionKey(<{state}>)"

    def __enter__(self) -> "SessionKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.zeroize()

    def __del__(self):
        self.zeroize()

    @property
    def is_wiped(self) -> bool:
        """True once the material has been overwritten."""
        return self._wiped

    def copy(self) -> "SessionKey":
        """Return an independent copy of this key."""
        return SessionKey(bytes(self))

    def zeroize(self) -> None:
        """Overwrite the key material with zeros."""
        material = getattr(self, "_material", None)
        if material is None:
            return
        for i in range(len(material)):
            material[i] = 0
        self._wiped = True


class SessionKeyStore:
    """
    Thread-safe single-slot holder for the live session key.

    The lock is held only while the slot is read or replaced, never while
    a caller encrypts or decrypts with the key it obtained.
    """

    _instance: Optional["SessionKeyStore"] = None
    _instance_lock = threading.Lock()

    def __init__(self):
        """Create an empty (locked) store. Use get_instance() for the process default."""
        self._key: Optional[SessionKey] = None
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "SessionKeyStore":
        """Get the process-wide key store."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Clear and drop the process-wide key store (for testing)."""
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.clear_key()
            cls._instance = None

    def set_key(self, key: SessionKey) -> None:
        """
        Install a new session key, wiping any previous one.

        The store takes ownership of ``key``; callers should not keep using it.

        Args:
            key: Freshly derived session key
        """
        with self._lock:
            previous, self._key = self._key, key
        if previous is not None and previous is not key:
            previous.zeroize()

    def clear_key(self) -> bool:
        """
        Empty the slot and wipe the previous key.

        Returns:
            True if a key was cleared, False if the store was already locked
        """
        with self._lock:
            previous, self._key = self._key, None
        if previous is None:
            return False
        previous.zeroize()
        return True

    def get_key(self) -> Optional[SessionKey]:
        """Return a copy of the live key, or None when locked."""
        with self._lock:
            if self._key is None:
                return None
            return self._key.copy()

    def require_key(self) -> SessionKey:
        """
        Return a copy of the live key or raise.

        Raises:
            VaultLockedError: If no key is set
        """
        key = self.get_key()
        if key is None:
            raise VaultLockedError()
        return key

    @property
    def is_locked(self) -> bool:
        """True when no session key is set."""
        with self._lock:
            return self._key is None


# Module-level convenience functions


def get_key_store() -> SessionKeyStore:
    """Get the global session key store."""
    return SessionKeyStore.get_instance()


def reset_key_store() -> None:
    """Wipe and discard the global session key store."""
    SessionKeyStore.reset_instance()


def is_vault_unlocked() -> bool:
    """Check if the global store holds a session key."""
    return not get_key_store().is_locked


def _wipe_on_exit() -> None:
    if SessionKeyStore._instance is not None:
        SessionKeyStore._instance.clear_key()


atexit.register(_wipe_on_exit)

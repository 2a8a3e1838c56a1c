"""Per-hunt evidence ledger.

Records description, ciphertext location and nonce for every encrypted
evidence item, plus a singleton info row with the hunt's display name.
"""

from .database import EvidenceLedger
from .models import CaseInfo, EvidenceRecord

__all__ = [
    "EvidenceLedger",
    "EvidenceRecord",
    "CaseInfo",
]

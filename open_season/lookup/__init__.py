"""External award lookup (USAspending.gov)."""

from .usaspending import (
    AwardLookupClient,
    AwardLookupError,
    AwardSummary,
    LookupResult,
)

__all__ = [
    "AwardLookupClient",
    "AwardLookupError",
    "AwardSummary",
    "LookupResult",
]

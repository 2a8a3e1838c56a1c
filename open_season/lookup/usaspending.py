"""USAspending.gov award lookup client.

Looks up federal contract awards mentioning a target name, so an
investigator can see at a glance whether a subject receives public money.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import httpx

from ..config.settings import LookupConfig, get_settings
from ..utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_PATH = "/api/v2/search/spending_by_award/"

RESULT_FIELDS = [
    "Award ID",
    "Recipient Name",
    "Start Date",
    "End Date",
    "Award Amount",
    "Description",
    "Awarding Agency",
    "Generated Internal ID",
    "Date Signed",
]


class AwardLookupError(Exception):
    """Raised when an award lookup request fails or returns garbage."""

    pass


@dataclass
class AwardSummary:
    """A single award returned by the lookup."""

    generated_internal_id: str
    date_signed: str
    description: Optional[str]
    total_obligation: float
    awarding_agency: str
    recipient_name: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generated_internal_id": self.generated_internal_id,
            "date_signed": self.date_signed,
            "description": self.description,
            "total_obligation": self.total_obligation,
            "awarding_agency": self.awarding_agency,
            "recipient_name": self.recipient_name,
        }

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "AwardSummary":
        """Create from one entry of the API's ``results`` list."""
        internal_id = data.get("generated_internal_id") or data.get("Generated Internal ID")
        return cls(
            generated_internal_id=internal_id or "",
            date_signed=data.get("Date Signed") or "",
            description=data.get("Description"),
            total_obligation=float(data.get("Award Amount") or 0.0),
            awarding_agency=data.get("Awarding Agency") or "",
            recipient_name=data.get("Recipient Name") or "",
        )


@dataclass
class LookupResult:
    """
    Merged outcome of several lookups.

    Keeps track of which targets failed so callers can tell "no awards"
    apart from "every lookup failed".
    """

    awards: list[AwardSummary] = field(default_factory=list)
    succeeded: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        """True if at least one lookup ran and none succeeded."""
        return bool(self.failures) and not self.succeeded

    @property
    def partial(self) -> bool:
        """True if some lookups succeeded and some failed."""
        return bool(self.failures) and bool(self.succeeded)


class AwardLookupClient:
    """Client for the USAspending award search API."""

    def __init__(
        self,
        config: Optional[LookupConfig] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize lookup client.

        Args:
            config: Lookup configuration (default from settings)
            client: Preconfigured httpx client (for custom transports)
        """
        self.config = config or get_settings().lookup
        self._client = client or httpx.Client(timeout=self.config.timeout)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "AwardLookupClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _payload(self, target_name: str) -> dict[str, Any]:
        return {
            "filters": {
                "keywords": [target_name],
                "award_amounts": [{"lower_bound": self.config.min_award_amount}],
                "award_type_codes": list(self.config.award_type_codes),
            },
            "fields": RESULT_FIELDS,
            "limit": self.config.limit,
            "page": 1,
        }

    def check_target(self, target_name: str) -> list[AwardSummary]:
        """
        Look up contract awards mentioning ``target_name``.

        Raises:
            AwardLookupError: On transport errors, non-2xx responses or
                unparseable bodies
        """
        url = f"{self.config.base_url}{SEARCH_PATH}"

        try:
            response = self._client.post(url, json=self._payload(target_name))
        except httpx.HTTPError as e:
            raise AwardLookupError(f"Request failed: {e}") from e

        if not response.is_success:
            raise AwardLookupError(f"API error: {response.status_code}")

        try:
            results = response.json()["results"]
            return [AwardSummary.from_api(item) for item in results]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise AwardLookupError(f"Parse error: {e}") from e

    def check_targets(self, target_names: Iterable[str]) -> LookupResult:
        """
        Look up several targets, collecting failures instead of aborting.

        Args:
            target_names: Names to search for

        Returns:
            LookupResult with merged awards and per-target failures
        """
        result = LookupResult()
        for name in target_names:
            try:
                awards = self.check_target(name)
            except AwardLookupError as e:
                logger.warning(f"Award lookup for {name!r} failed: {e}")
                result.failures[name] = str(e)
                continue
            result.succeeded.append(name)
            result.awards.extend(awards)
        return result

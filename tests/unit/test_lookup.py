"""Unit tests for the USAspending award lookup client."""

import json

import httpx
import pytest

AWARD = {
    "Award ID": "W911NF-20-C-0001",
    "Recipient Name": "ACME CORP",
    "Award Amount": 2500000.0,
    "Description": "Widgets",
    "Awarding Agency": "Department of Defense",
    "generated_internal_id": "CONT_AWD_123",
    "Date Signed": "2020-03-01",
}


def _client(handler):
    """Build a lookup client backed by a mock transport."""
    from open_season.config.settings import LookupConfig
    from open_season.lookup import AwardLookupClient

    config = LookupConfig(base_url="https://usaspending.test")
    return AwardLookupClient(config=config, client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestAwardSummary:
    """Tests for parsing API results."""

    def test_from_api(self):
        """Test fields are mapped from the API's display names."""
        from open_season.lookup import AwardSummary

        award = AwardSummary.from_api(AWARD)

        assert award.recipient_name == "ACME CORP"
        assert award.total_obligation == 2500000.0
        assert award.generated_internal_id == "CONT_AWD_123"
        assert award.awarding_agency == "Department of Defense"

    def test_from_api_missing_fields(self):
        """Test absent fields fall back to empty values."""
        from open_season.lookup import AwardSummary

        award = AwardSummary.from_api({"Generated Internal ID": "X"})

        assert award.generated_internal_id == "X"
        assert award.total_obligation == 0.0
        assert award.description is None


class TestCheckTarget:
    """Tests for single-target lookups."""

    def test_request_payload(self):
        """Test the search request filters on the target name."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": [AWARD]})

        with _client(handler) as client:
            awards = client.check_target("Acme")

        assert seen["url"] == "https://usaspending.test/api/v2/search/spending_by_award/"
        assert seen["body"]["filters"]["keywords"] == ["Acme"]
        assert seen["body"]["filters"]["award_type_codes"] == ["A", "B", "C", "D"]
        assert len(awards) == 1

    def test_http_error_status(self):
        """Test non-2xx responses raise AwardLookupError."""
        from open_season.lookup import AwardLookupError

        with _client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(AwardLookupError, match="500"):
                client.check_target("Acme")

    def test_transport_error(self):
        """Test connection failures raise AwardLookupError."""
        from open_season.lookup import AwardLookupError

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with _client(handler) as client:
            with pytest.raises(AwardLookupError):
                client.check_target("Acme")

    def test_bad_body(self):
        """Test malformed bodies raise AwardLookupError."""
        from open_season.lookup import AwardLookupError

        with _client(lambda request: httpx.Response(200, json={"unexpected": True})) as client:
            with pytest.raises(AwardLookupError):
                client.check_target("Acme")


class TestCheckTargets:
    """Tests for multi-target lookups."""

    def test_partial_failure(self):
        """Test one failing target does not hide the others' results."""

        def handler(request):
            name = json.loads(request.content)["filters"]["keywords"][0]
            if name == "Broken":
                return httpx.Response(503)
            return httpx.Response(200, json={"results": [AWARD]})

        with _client(handler) as client:
            result = client.check_targets(["Acme", "Broken", "Other"])

        assert result.succeeded == ["Acme", "Other"]
        assert list(result.failures) == ["Broken"]
        assert len(result.awards) == 2
        assert result.partial
        assert not result.all_failed

    def test_all_failed(self):
        """Test total failure is distinguishable from no results."""
        with _client(lambda request: httpx.Response(500)) as client:
            result = client.check_targets(["Acme", "Other"])

        assert result.all_failed
        assert result.awards == []

    def test_no_results(self):
        """Test successful lookups with nothing found."""
        with _client(lambda request: httpx.Response(200, json={"results": []})) as client:
            result = client.check_targets(["Nobody"])

        assert not result.all_failed
        assert not result.partial
        assert result.awards == []

"""Integration tests for CLI commands."""

import json
import re
import zipfile
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from open_season.cli.main import app


runner = CliRunner()

PASSWORD = ["--password", "correct horse"]


def _create(name: str = "Alpha") -> str:
    """Create a hunt through the CLI and return its ID."""
    result = runner.invoke(app, ["create", name, *PASSWORD])
    assert result.exit_code == 0, result.stdout
    match = re.search(r"[0-9a-f]{32}", result.stdout)
    assert match, result.stdout
    return match.group(0)


class TestVersionCommand:
    """Tests for the version command."""

    def test_version(self):
        """'version' prints the package version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Open Season v0.1.0" in result.stdout


class TestSaltCommand:
    """Tests for the salt command."""

    def test_salt_created_and_stable(self):
        """'salt' creates the salt once and then reports the same value."""
        first = runner.invoke(app, ["salt"])
        second = runner.invoke(app, ["salt"])

        assert first.exit_code == 0
        assert first.stdout == second.stdout


class TestCreateCommand:
    """Tests for hunt creation."""

    def test_create(self):
        """'create' makes a hunt that 'list' then shows."""
        _create("Alpha")

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "Alpha" in result.stdout

    def test_create_with_env_password(self):
        """'create' reads the password from the environment."""
        result = runner.invoke(
            app, ["create", "Beta"], env={"OPEN_SEASON_PASSWORD": "correct horse"}
        )

        assert result.exit_code == 0
        assert "Created hunt" in result.stdout

    def test_create_prompts_for_password(self):
        """'create' prompts when no password is given."""
        result = runner.invoke(app, ["create", "Gamma"], input="correct horse\n")

        assert result.exit_code == 0
        assert "Created hunt" in result.stdout

    def test_create_empty_name(self):
        """'create' with a blank name exits with an error."""
        result = runner.invoke(app, ["create", " ", *PASSWORD])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_list_empty(self):
        """'list' with no hunts says so."""
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "No hunts found" in result.stdout


class TestEvidenceCommands:
    """Tests for adding, listing and extracting evidence."""

    def test_add_and_extract(self, tmp_path: Path):
        """Evidence added with 'add' decrypts back with 'extract'."""
        hunt_id = _create()
        source = tmp_path / "notes.txt"
        source.write_bytes(b"hello world")
        output = tmp_path / "decrypted.txt"

        added = runner.invoke(app, ["add", hunt_id, str(source), "-d", "Field notes", *PASSWORD])
        assert added.exit_code == 0, added.stdout

        listed = runner.invoke(app, ["evidence", hunt_id])
        assert listed.exit_code == 0
        assert "Field notes" in listed.stdout

        extracted = runner.invoke(app, ["extract", hunt_id, "1", "-o", str(output), *PASSWORD])
        assert extracted.exit_code == 0, extracted.stdout
        assert output.read_bytes() == b"hello world"

    def test_extract_wrong_password(self, tmp_path: Path):
        """'extract' with the wrong password fails without writing output."""
        hunt_id = _create()
        source = tmp_path / "notes.txt"
        source.write_bytes(b"hello world")
        output = tmp_path / "decrypted.txt"
        runner.invoke(app, ["add", hunt_id, str(source), *PASSWORD])

        result = runner.invoke(
            app, ["extract", hunt_id, "1", "-o", str(output), "--password", "wrong horse"]
        )

        assert result.exit_code == 1
        assert "Decryption failed" in result.stdout
        assert not output.exists()

    def test_extract_unwritable_output(self, tmp_path: Path):
        """'extract' into a missing directory reports an error instead of crashing."""
        hunt_id = _create()
        source = tmp_path / "notes.txt"
        source.write_bytes(b"hello world")
        runner.invoke(app, ["add", hunt_id, str(source), *PASSWORD])
        output = tmp_path / "no-such-dir" / "decrypted.txt"

        result = runner.invoke(app, ["extract", hunt_id, "1", "-o", str(output), *PASSWORD])

        assert result.exit_code == 1
        assert "Failed to write" in result.stdout
        assert not output.exists()

    def test_add_missing_file(self, tmp_path: Path):
        """'add' with a missing file exits with an error."""
        hunt_id = _create()

        result = runner.invoke(app, ["add", hunt_id, str(tmp_path / "nope"), *PASSWORD])

        assert result.exit_code == 1
        assert "not found" in result.stdout.lower()

    def test_evidence_unknown_hunt(self):
        """'evidence' on an unknown hunt exits with an error."""
        result = runner.invoke(app, ["evidence", "missing"])

        assert result.exit_code == 1
        assert "Hunt not found" in result.stdout

    def test_rename(self):
        """'rename' changes the name shown by 'list'."""
        hunt_id = _create("Alpha")

        result = runner.invoke(app, ["rename", hunt_id, "Omega"])

        assert result.exit_code == 0
        assert "Omega" in runner.invoke(app, ["list"]).stdout


class TestBundleCommands:
    """Tests for export and import."""

    def test_export_import(self, tmp_path: Path):
        """A hunt exported to out.osb imports as hunt 'out'."""
        hunt_id = _create("Alpha")
        archive = tmp_path / "out.osb"

        exported = runner.invoke(app, ["export", hunt_id, str(archive)])
        assert exported.exit_code == 0, exported.stdout
        assert archive.exists()

        imported = runner.invoke(app, ["import", str(archive)])
        assert imported.exit_code == 0, imported.stdout
        assert "Imported hunt: out" in imported.stdout

        listed = runner.invoke(app, ["evidence", "out"])
        assert "Alpha" in listed.stdout

    def test_import_twice(self, tmp_path: Path):
        """Importing the same bundle twice fails the second time."""
        hunt_id = _create()
        archive = tmp_path / "dup.osb"
        runner.invoke(app, ["export", hunt_id, str(archive)])

        runner.invoke(app, ["import", str(archive)])
        result = runner.invoke(app, ["import", str(archive)])

        assert result.exit_code == 1
        assert "already exists" in result.stdout

    def test_import_reports_skipped(self, tmp_path: Path):
        """'import' lists entries it refused to extract."""
        archive = tmp_path / "evil.osb"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("../evil", b"escaped")
            zf.writestr("evidence/ok.enc", b"fine")

        result = runner.invoke(app, ["import", str(archive)])

        assert result.exit_code == 0
        assert "Skipped unsafe entries: 1" in result.stdout
        assert not (tmp_path / "evil").exists()

    def test_import_missing_file(self, tmp_path: Path):
        """'import' of a missing file exits with an error."""
        result = runner.invoke(app, ["import", str(tmp_path / "missing.osb")])

        assert result.exit_code == 1


class TestLookupCommand:
    """Tests for the award lookup command."""

    @pytest.fixture
    def mock_lookup(self, monkeypatch):
        """Route lookups through a mock transport."""
        import open_season.lookup as lookup

        real_client = lookup.AwardLookupClient
        responses = {}

        def handler(request):
            name = json.loads(request.content)["filters"]["keywords"][0]
            return responses.get(name, httpx.Response(500))

        def factory():
            return real_client(client=httpx.Client(transport=httpx.MockTransport(handler)))

        monkeypatch.setattr(lookup, "AwardLookupClient", factory)
        return responses

    def test_lookup_results(self, mock_lookup):
        """'lookup' shows awards in a table."""
        mock_lookup["Acme"] = httpx.Response(
            200,
            json={"results": [{"Recipient Name": "ACME", "Award Amount": 1000.0}]},
        )

        result = runner.invoke(app, ["lookup", "Acme"])

        assert result.exit_code == 0
        assert "ACME" in result.stdout

    def test_lookup_all_failed(self, mock_lookup):
        """'lookup' exits with an error when every target fails."""
        result = runner.invoke(app, ["lookup", "Acme", "Other"])

        assert result.exit_code == 1
        assert "all lookups failed" in result.stdout

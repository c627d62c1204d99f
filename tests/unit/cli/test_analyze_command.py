"""Unit tests for the analyze command."""

import asyncio
import json
from unittest.mock import patch

from typer.testing import CliRunner
from ucdstore.cli.main import app
from ucdstore.core.store import UCDStore

runner = CliRunner()

OPEN_STORE = "ucdstore.cli.commands.analyze.open_store"


class TestAnalyzeCommand:
    """Tests for analyze command."""

    def test_help(self) -> None:
        """Help shows the options."""
        result = runner.invoke(app, ["analyze", "--help"])

        assert result.exit_code == 0
        assert "--no-orphans" in result.stdout
        assert "--format" in result.stdout

    def test_incomplete_store_exits_1(self, ucd_store: UCDStore) -> None:
        """An empty store is incomplete."""
        with patch(OPEN_STORE, return_value=ucd_store):
            result = runner.invoke(app, ["analyze"])

        assert result.exit_code == 1
        assert "Store Analysis" in result.stdout
        assert "corrupted" in result.stdout

    def test_complete_store(self, ucd_store: UCDStore) -> None:
        """A mirrored store is healthy."""
        asyncio.run(ucd_store.mirror())

        with patch(OPEN_STORE, return_value=ucd_store):
            result = runner.invoke(app, ["analyze"])

        assert result.exit_code == 0
        assert "healthy" in result.stdout

    def test_files_listed(self, ucd_store: UCDStore) -> None:
        """--files lists missing files."""
        with patch(OPEN_STORE, return_value=ucd_store):
            result = runner.invoke(app, ["analyze", "--files"])

        assert "15.1.0/Unihan.zip" in result.stdout
        assert "(missing)" in result.stdout

    def test_json_output(self, ucd_store: UCDStore) -> None:
        """JSON output contains a summary and per-version results."""
        with patch(OPEN_STORE, return_value=ucd_store):
            result = runner.invoke(app, ["analyze", "--format", "json"])

        data = json.loads(result.stdout)
        assert data["summary"]["health"] == "corrupted"
        assert [v["version"] for v in data["versions"]] == ["16.0.0", "15.1.0"]
        assert data["versions"][1]["files"]["missing"] == ["UnicodeData.txt", "Unihan.zip"]

    def test_store_error(self, make_context, make_client) -> None:
        """Resolver failures are printed and exit 1."""
        failing = UCDStore(make_context(client=make_client(tree_failures=["16.0.0"])))

        with patch(OPEN_STORE, return_value=failing):
            result = runner.invoke(app, ["analyze"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "16.0.0" in result.output

    def test_unknown_version_rejected(self, ucd_store: UCDStore) -> None:
        """Versions outside the store are refused before anything runs."""
        with patch(OPEN_STORE, return_value=ucd_store):
            result = runner.invoke(app, ["analyze", "99.9.9"])

        assert result.exit_code == 1
        assert "does not exist in the store" in result.output
        assert "16.0.0, 15.1.0" in result.output

    def test_selected_version_only(self, ucd_store: UCDStore) -> None:
        """Only the named versions are analyzed."""
        with patch(OPEN_STORE, return_value=ucd_store):
            result = runner.invoke(app, ["analyze", "15.1.0", "--format", "json"])

        data = json.loads(result.stdout)
        assert [v["version"] for v in data["versions"]] == ["15.1.0"]

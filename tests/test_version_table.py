"""Tests for the bundled version table."""

import json

from setup_haskell.core.version_table import MATCHER_FILE, VersionTable, load_version_table
from setup_haskell.models.tool import OS, Tool


def test_bundled_table_loads():
    table = load_version_table()

    for tool in Tool:
        assert table.supported(tool), tool
    assert table.ghcup_version
    assert table.revisions(Tool.GHC, OS.WIN32)


def test_bundled_table_has_chocolatey_revision_for_710():
    table = load_version_table()
    revisions = {e.from_version: e.to for e in table.revisions(Tool.GHC, OS.WIN32)}
    assert revisions["7.10.3"] == "7.10.3.1"


def test_load_from_custom_files(tmp_path):
    versions = tmp_path / "versions.json"
    revisions = tmp_path / "revisions.json"
    versions.write_text(json.dumps({"ghc": ["9.0.2"], "cabal": ["3.4.1.0"], "stack": ["2.7.5"], "ghcup": ["0.1.19.0"]}))
    revisions.write_text(json.dumps({}))

    table = load_version_table(versions, revisions)

    assert table.supported(Tool.GHC) == ("9.0.2",)
    assert table.ghcup_version == "0.1.19.0"
    assert table.revisions(Tool.CABAL, OS.WIN32) == ()


def test_missing_tool_has_no_supported_versions():
    table = VersionTable.from_documents({"ghc": ["9.4.8"], "ghcup": ["0.1.50.2"]}, {})
    assert table.supported(Tool.STACK) == ()


def test_matcher_file_is_shipped():
    assert json.loads(MATCHER_FILE.read_text())["problemMatcher"]

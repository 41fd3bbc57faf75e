"""Tests for version token resolution."""

import logging

import pytest

from setup_haskell.core.resolver import release_revision, resolve
from setup_haskell.models.tool import OS, Tool


@pytest.mark.parametrize("tool", list(Tool))
@pytest.mark.parametrize("os", list(OS))
def test_latest_is_first_supported(table, tool, os):
    supported = table.supported(tool)
    assert resolve("latest", supported, tool, os) == supported[0]


def test_exact_versions_resolve_to_themselves(table):
    for tool in Tool:
        for version in table.supported(tool):
            assert resolve(version, table.supported(tool), tool, OS.LINUX) == version


def test_prefix_takes_first_list_match_not_highest():
    supported = ["9.2.4", "9.2.8", "9.0.2"]
    assert resolve("9.2", supported, Tool.GHC, OS.LINUX) == "9.2.4"


def test_prefix_does_not_match_longer_component():
    supported = ["8.10.7", "8.10.2", "8.8.4"]
    assert resolve("8.1", supported, Tool.GHC, OS.LINUX) == "8.1"


def test_prefix_requires_dot_boundary():
    supported = ["2.11.1", "2.1.3"]
    assert resolve("2.1", supported, Tool.STACK, OS.LINUX) == "2.1.3"


def test_minor_prefix_resolves_to_newest_patch():
    supported = ["9.4.8", "9.4.7", "9.2.8"]
    assert resolve("9.4", supported, Tool.GHC, OS.DARWIN) == "9.4.8"


def test_unknown_token_passes_through():
    supported = ["8.10.7", "8.10.2", "8.8.4"]
    assert resolve("9.99.99", supported, Tool.GHC, OS.LINUX) == "9.99.99"
    assert resolve("head", supported, Tool.GHC, OS.LINUX) == "head"


def test_verbose_logs_non_identity_resolution(caplog):
    with caplog.at_level(logging.INFO, logger="setup_haskell.core.resolver"):
        resolve("8.8", ["8.10.7", "8.8.4"], Tool.GHC, OS.LINUX, verbose=True)
        resolve("8.8.4", ["8.10.7", "8.8.4"], Tool.GHC, OS.LINUX, verbose=True)
        resolve("8.10", ["8.10.7", "8.8.4"], Tool.GHC, OS.LINUX, verbose=False)

    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Resolved ghc 8.8 to 8.8.4"]


def test_release_revision_lookup(table):
    assert release_revision("7.10.3", Tool.GHC, OS.WIN32, table) == "7.10.3.1"


def test_release_revision_defaults_to_version(table):
    assert release_revision("9.4.8", Tool.GHC, OS.WIN32, table) == "9.4.8"
    assert release_revision("7.10.3", Tool.GHC, OS.LINUX, table) == "7.10.3"
    assert release_revision("3.10.3.0", Tool.CABAL, OS.DARWIN, table) == "3.10.3.0"

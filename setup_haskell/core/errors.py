"""
Exceptions raised while preparing the Haskell toolchain.
"""

from typing import Iterable, List


class SetupError(Exception):
    """Base class for all setup failures."""


class InputParseError(SetupError, ValueError):
    """A single action input has a malformed value (boolean, URL)."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(message)


class ConfigurationError(SetupError):
    """One or more action inputs contradict each other.

    All violated constraints are collected in ``problems`` so they can be
    reported in a single round-trip.
    """

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("\n".join(self.problems))


class InstallationFailedError(SetupError):
    """Every install strategy for a tool was exhausted without success."""

    def __init__(self, tool: str, version: str):
        self.tool = tool
        self.version = version
        super().__init__(f"All install methods for {tool} {version} failed")


class UnsupportedPlatformError(SetupError):
    """The runner's operating system or architecture is not supported."""

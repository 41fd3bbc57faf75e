"""
Resolution of user supplied version tokens against the version table.
"""

import logging
from typing import Sequence

from ..models.tool import OS, Tool
from .version_table import VersionTable

logger = logging.getLogger(__name__)

LATEST = "latest"


def resolve(version: str,
            supported: Sequence[str],
            tool: Tool,
            os: OS,
            verbose: bool = False) -> str:
    """
    Resolve ``version`` against ``supported`` (ordered newest first).

    ``latest`` picks the first entry, an exact match is returned as is, and a
    prefix such as ``9.4`` picks the first entry starting with ``9.4.``. The
    first list match wins, not the highest version. Anything else is passed
    through.

    Args:
        version: Token requested by the user
        supported: Supported versions, newest first
        tool: Tool being resolved (used for the notice only)
        os: Runner OS
        verbose: Log a notice when the result differs from the token

    Returns:
        Resolved version
    """
    if version == LATEST and supported:
        result = supported[0]
    elif version in supported:
        result = version
    else:
        # Trailing "." so that stack "2.1" resolves to "2.1.3" and not "2.11.1".
        prefix = version + "."
        result = next((v for v in supported if v.startswith(prefix)), version)

    if verbose and result != version:
        logger.info(f"Resolved {tool.value} {version} to {result}")
    return result


def release_revision(version: str, tool: Tool, os: OS, table: VersionTable) -> str:
    """Packaged revision of ``version`` on ``os`` (only chocolatey needs one)."""
    for entry in table.revisions(tool, os):
        if entry.from_version == version:
            return entry.to
    return version

"""
Static table of supported tool versions and chocolatey release revisions.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field

from ..models.tool import OS, Tool

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
VERSIONS_FILE = DATA_DIR / "versions.json"
REVISIONS_FILE = DATA_DIR / "release-revisions.json"
MATCHER_FILE = DATA_DIR / "matcher.json"


class RevisionEntry(BaseModel):
    """Maps an upstream release to its packaged revision."""
    from_version: str = Field(..., alias="from")
    to: str

    class Config:
        frozen = True
        populate_by_name = True


class VersionTable(BaseModel):
    """Supported versions per tool (newest first) and release revisions per OS."""
    supported_versions: Dict[Tool, Tuple[str, ...]]
    ghcup_versions: Tuple[str, ...] = Field(..., min_length=1)
    release_revisions: Dict[OS, Dict[Tool, Tuple[RevisionEntry, ...]]] = Field(default_factory=dict)

    class Config:
        frozen = True

    @property
    def ghcup_version(self) -> str:
        """The pinned ghcup release."""
        return self.ghcup_versions[0]

    def supported(self, tool: Tool) -> Tuple[str, ...]:
        return self.supported_versions.get(tool, ())

    def revisions(self, tool: Tool, os: OS) -> Tuple[RevisionEntry, ...]:
        return self.release_revisions.get(os, {}).get(tool, ())

    @classmethod
    def from_documents(cls, versions: Dict[str, list], revisions: Dict[str, Dict[str, list]]) -> "VersionTable":
        """Build a table from the decoded JSON documents."""
        return cls(
            supported_versions={t: tuple(versions.get(t.value, [])) for t in Tool},
            ghcup_versions=tuple(versions.get("ghcup", [])),
            release_revisions=revisions,
        )


def load_version_table(versions_file: Optional[Path] = None,
                       revisions_file: Optional[Path] = None) -> VersionTable:
    """
    Load the version table from disk.

    Args:
        versions_file: Override for ``versions.json``
        revisions_file: Override for ``release-revisions.json``

    Returns:
        Immutable version table
    """
    logger = logging.getLogger(__name__)
    versions_path = Path(versions_file or VERSIONS_FILE)
    revisions_path = Path(revisions_file or REVISIONS_FILE)

    with open(versions_path, encoding="utf-8") as f:
        versions = json.load(f)
    with open(revisions_path, encoding="utf-8") as f:
        revisions = json.load(f)

    table = VersionTable.from_documents(versions, revisions)
    logger.debug(
        f"Loaded version table from {versions_path}: "
        + ", ".join(f"{t.value}={len(table.supported(t))}" for t in Tool)
    )
    return table

"""
Well-known install locations probed to decide whether a tool is installed.
"""

import logging
from pathlib import Path, PureWindowsPath
from typing import List, Optional

from config.settings import PathsConfig

from ..models.installation import Probe, ProbeKind
from ..models.tool import OS, Tool

logger = logging.getLogger(__name__)

WIN32_GHCUP_BIN = "C:/ghcup/bin"


def ghcup_bin_dir(os: OS, paths: PathsConfig) -> str:
    """Directory ghcup installs binaries into."""
    if os == OS.WIN32:
        return WIN32_GHCUP_BIN
    return str(Path(paths.home) / ".ghcup" / "bin")


def choco_roots(tool: Tool, version: str, revision: str, paths: PathsConfig) -> List[Path]:
    """
    Candidate chocolatey install roots, newer layout first.

    Newer packages extract to ``{tools}/{tool}-{version}``, older ones live in
    ``{ChocolateyInstall}/lib/{tool}.{revision}``.
    """
    tools_location = paths.chocolatey_tools_location or str(PureWindowsPath(paths.system_drive + "\\") / "tools")
    return [
        Path(tools_location) / f"{tool.value}-{version}",
        Path(paths.chocolatey_install) / "lib" / f"{tool.value}.{revision}",
    ]


def find_choco_bin(root: Path, tool: Tool) -> Optional[str]:
    """Directory of the first ``{tool}.exe`` below ``root``."""
    if not root.is_dir():
        return None
    for exe in sorted(root.rglob(f"{tool.value}.exe")):
        logger.debug(f"find_choco_bin(): found {tool.value} at {exe}")
        return str(exe.parent)
    logger.debug(f"find_choco_bin(): cannot find binary for {tool.value} in {root}")
    return None


def install_locations(tool: Tool, version: str, revision: str, os: OS, paths: PathsConfig) -> List[Probe]:
    """
    Ordered probes for ``tool`` on ``os``.

    Chocolatey locations come before the ghcup bin directory: a chocolatey
    path identifies exactly one version, while ghcup may have a different
    version set as default.

    Args:
        tool: Tool to locate
        version: Resolved version
        revision: Chocolatey release revision of ``version``
        os: Runner OS
        paths: Runner locations

    Returns:
        Probes in evaluation order
    """
    if tool == Tool.STACK:
        # Always installed into the tool cache
        return []

    probes: List[Probe] = []
    if os == OS.WIN32:
        for root in choco_roots(tool, version, revision, paths):
            bin_dir = find_choco_bin(root, tool)
            if bin_dir:
                probes.append(Probe(path=bin_dir, kind=ProbeKind.UNAMBIGUOUS))
    probes.append(Probe(path=ghcup_bin_dir(os, paths), kind=ProbeKind.MULTI_VERSION))
    return probes

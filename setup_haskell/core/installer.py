"""
Installer orchestrator: reset, install and verify each tool.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from config.settings import PathsConfig

from ..integrations.actions import ActionsClient
from ..models.installation import InstallAttempt, InstallationResult, ProbeKind, StrategyOutcome
from ..models.tool import Arch, OS, Tool
from .errors import InstallationFailedError
from .probes import install_locations
from .resolver import release_revision
from .strategies import StrategyRunner, strategies_for
from .version_table import VersionTable

RUNNER_IMAGES_URL = "https://github.com/actions/runner-images#available-images"


class ToolInstaller:
    """Installs ghc, cabal and stack, verifying every step through probes."""

    def __init__(self,
                 os: OS,
                 arch: Arch,
                 strategies: StrategyRunner,
                 actions: ActionsClient,
                 table: VersionTable,
                 paths: PathsConfig):
        """
        Initialize the installer.

        Args:
            os: Runner OS
            arch: Runner architecture
            strategies: Executes individual install strategies
            actions: Runner integration for outputs and PATH
            table: Version table (for release revisions)
            paths: Runner locations
        """
        self.logger = logging.getLogger(__name__)
        self.os = os
        self.arch = arch
        self.strategies = strategies
        self.actions = actions
        self.table = table
        self.paths = paths

    async def reset_tool(self, tool: Tool, version: str) -> None:
        """
        Clear any default ghcup has set for ``tool``.

        This guarantees :meth:`install_tool` never reuses a previously set
        default of a different version. stack and windows need nothing.
        """
        if tool == Tool.STACK or self.os == OS.WIN32:
            return
        await self.strategies.ghcup(["unset", tool.value])

    async def install_tool(self, tool: Tool, version: str) -> InstallationResult:
        """
        Make ``tool`` ``version`` available, trying each applicable strategy.

        Args:
            tool: Tool to install
            version: Resolved version

        Returns:
            Result with the directory the tool was found in

        Raises:
            InstallationFailedError: If no strategy leads to a verified install
        """
        result = InstallationResult(tool=tool, version=version)

        path = await self.is_installed(tool, version)
        if path:
            result.success = True
            result.from_cache = True
            result.path = path
            return result
        self._warn(tool, version)

        for spec in strategies_for(self.os, tool):
            attempt = InstallAttempt(
                tool=tool, version=version, os=self.os, arch=self.arch, strategy=spec.kind
            )
            attempt.outcome = await self.strategies.run(spec, tool, version)
            result.attempts.append(attempt)
            self.logger.debug(f"install_tool {tool.value} {version}: {spec.kind.value} {attempt.outcome.value}")
            if attempt.outcome == StrategyOutcome.DECLINED:
                continue

            path = await self.is_installed(tool, version)
            if path:
                attempt.verified = True
                result.success = True
                result.path = path
                return result

        raise InstallationFailedError(tool.value, version)

    async def is_installed(self, tool: Tool, version: str) -> Optional[str]:
        """
        Check whether ``tool`` ``version`` is installed; on success wire it up.

        The tool cache is consulted first. Then the well-known locations are
        probed in order. A ghcup location is only trusted once
        ``ghcup set`` succeeds; otherwise the stale default is unset.

        Returns:
            Directory of the tool, or None if not installed
        """
        cached = self.strategies.tool_cache.find(tool.value, version)
        if cached:
            return self._success(tool, version, str(cached))

        revision = release_revision(version, tool, self.os, self.table)
        probes = install_locations(tool, version, revision, self.os, self.paths)
        self.logger.debug(f"is_installed {tool.value} {version} {[p.path for p in probes]}")

        for probe in probes:
            self.logger.info(f"Attempting to access tool {tool.value} at location {probe.path}")
            if not Path(probe.path).exists():
                self.logger.info(f"Failed to access tool {tool.value} at location {probe.path}")
                continue
            self.logger.info(f"Succeeded accessing tool {tool.value} at location {probe.path}")

            if probe.kind == ProbeKind.UNAMBIGUOUS:
                # Chocolatey paths are version specific
                return self._success(tool, version, probe.path)

            # If `ghcup set` fails, the version we want is not actually installed
            if await self.strategies.ghcup(["set", tool.value, version]) == 0:
                return self._success(tool, version, probe.path)
            # Do not leave a default of the wrong version behind
            await self.strategies.ghcup(["unset", tool.value])

        return None

    def _success(self, tool: Tool, version: str, path: str) -> str:
        self.actions.add_path(path)
        self._configure_outputs(tool, version, path)
        self.logger.info(f"Found {tool.value} {version} in cache at path {path}. Setup successful.")
        return path

    def _configure_outputs(self, tool: Tool, version: str, path: str) -> None:
        self.actions.set_output(f"{tool.value}-path", path)
        self.actions.set_output(
            f"{tool.value}-exe", shutil.which(tool.value, path=self.actions.environ.get("PATH")) or ""
        )
        if tool == Tool.STACK:
            stack_root = self.paths.stack_root or (
                "C:\\sr" if self.os == OS.WIN32 else f"{self.paths.home}/.stack"
            )
            self.actions.set_output("stack-root", stack_root)
            if self.os == OS.WIN32:
                self.actions.export_variable("STACK_ROOT", stack_root)
        self.actions.set_output(f"{tool.value}-version", version)

    def _warn(self, tool: Tool, version: str) -> None:
        self.logger.debug(
            f"{tool.value} {version} was not found in the cache. It will be downloaded.\n"
            f"If this is unexpected, please check if version {version} is pre-installed.\n"
            f"The list of pre-installed versions is available from here: {RUNNER_IMAGES_URL}\n"
            "If the list is outdated, please file an issue here: https://github.com/actions/runner-images/issues\n"
            "by using the appropriate tool request template: https://github.com/actions/runner-images/issues/new/choose"
        )

"""
Setup runner - resolves inputs, then installs and configures the toolchain.
"""

import logging
import platform
import sys
from typing import Mapping, Optional

from config.settings import Settings

from ..integrations.actions import ActionsClient
from ..models.installation import RunSummary
from ..models.tool import Arch, OS, Options, Tool
from .errors import UnsupportedPlatformError
from .installer import ToolInstaller
from .options import get_defaults, get_opts
from .post_install import PostInstallConfigurator
from .process_runner import ProcessRunner
from .strategies import StrategyRunner
from .tool_cache import ToolCache
from .version_table import MATCHER_FILE, VersionTable, load_version_table

MACHINE_ARCHES = {
    "x86_64": Arch.X64,
    "amd64": Arch.X64,
    "x64": Arch.X64,
    "arm64": Arch.ARM64,
    "aarch64": Arch.ARM64,
}


def detect_os(override: Optional[OS] = None) -> OS:
    if override:
        return override
    if sys.platform.startswith("linux"):
        return OS.LINUX
    if sys.platform == "darwin":
        return OS.DARWIN
    if sys.platform == "win32":
        return OS.WIN32
    raise UnsupportedPlatformError(f"Unsupported operating system: {sys.platform}")


def detect_arch(override: Optional[Arch] = None) -> Arch:
    if override:
        return override
    machine = platform.machine().lower()
    try:
        return MACHINE_ARCHES[machine]
    except KeyError:
        raise UnsupportedPlatformError(f"Unsupported architecture: {machine}")


class SetupRunner:
    """Runs one complete setup: validate everything first, then install."""

    def __init__(self,
                 settings: Settings,
                 actions: ActionsClient,
                 runner: Optional[ProcessRunner] = None,
                 table: Optional[VersionTable] = None):
        """
        Initialize the setup runner.

        Args:
            settings: Application settings
            actions: Runner integration
            runner: Process runner (a fresh one when None)
            table: Version table (loaded from settings when None)
        """
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.actions = actions
        self.runner = runner or ProcessRunner()
        self._table = table

    @property
    def table(self) -> VersionTable:
        if self._table is None:
            self._table = load_version_table(self.settings.versions_file, self.settings.revisions_file)
        return self._table

    def is_debug(self) -> bool:
        return self.settings.runner_debug or self.actions.is_debug()

    def build_options(self, os: OS, inputs: Mapping[str, str]) -> Options:
        tokens = {
            Tool.GHC: self.settings.defaults.ghc_version,
            Tool.CABAL: self.settings.defaults.cabal_version,
            Tool.STACK: self.settings.defaults.stack_version,
        }
        return get_opts(get_defaults(os, self.table, tokens), os, inputs)

    async def run(self, inputs: Mapping[str, str]) -> RunSummary:
        """
        Set up the Haskell toolchain requested by ``inputs``.

        Errors never escape: in debug mode they are reported through the
        ``failed`` output so the failure path can be tested, otherwise the
        step is marked as failed.

        Args:
            inputs: Raw action inputs keyed by input name

        Returns:
            Summary of the run
        """
        summary = RunSummary()
        try:
            await self._run(inputs, summary)
            summary.complete(success=True)
        except Exception as error:
            message = str(error)
            summary.complete(success=False, error=message)
            if self.is_debug():
                self.actions.set_output("failed", True)
                self.logger.debug(message)
            else:
                self.actions.set_failed(message)
        return summary

    async def _run(self, inputs: Mapping[str, str], summary: RunSummary) -> None:
        self.logger.info("Preparing to setup a Haskell environment")
        os = detect_os(self.settings.os_override)
        arch = detect_arch(self.settings.arch_override)
        opts = self.build_options(os, inputs)
        self.logger.debug(f"run: os     = {os.value}")
        self.logger.debug(f"run: arch   = {arch.value}")
        self.logger.debug(f"run: opts   = {opts.model_dump_json()}")

        paths = self.settings.paths
        tool_cache = ToolCache(paths.tool_cache, paths.temp, arch.value)
        strategies = StrategyRunner(os, arch, self.runner, tool_cache, self.actions, self.table, paths)
        installer = ToolInstaller(os, arch, strategies, self.actions, self.table, paths)

        if opts.ghcup.release_channels:
            async with self.actions.group("Preparing ghcup environment"):
                for channel in opts.ghcup.release_channels:
                    await strategies.add_release_channel(str(channel))

        for tool in opts.enabled_tools():
            resolved = opts.program(tool).resolved
            async with self.actions.group(f"Preparing {tool.value} environment"):
                await installer.reset_tool(tool, resolved)
            async with self.actions.group(f"Installing {tool.value} version {resolved}"):
                summary.results[tool.value] = await installer.install_tool(tool, resolved)

        await PostInstallConfigurator(os, self.runner, self.actions, paths).configure(opts)

        self.actions.add_matcher(MATCHER_FILE)

"""
Install strategies per operating system and tool.

Which strategies are tried, and in what order, is plain data
(:data:`STRATEGY_TABLE`). :class:`StrategyRunner` executes a single entry and
reports a :class:`StrategyOutcome`; it never verifies the installation.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from packaging.version import InvalidVersion, Version

from config.settings import PathsConfig

from ..integrations.actions import ActionsClient
from ..models.installation import StrategyKind, StrategyOutcome
from ..models.tool import Arch, OS, Tool
from .errors import UnsupportedPlatformError
from .probes import choco_roots, find_choco_bin
from .process_runner import ProcessRunner
from .resolver import release_revision
from .tool_cache import ToolCache, ToolCacheError
from .version_table import VersionTable

HEAD = "head"

GHC_HEAD_URL = (
    "https://gitlab.haskell.org/ghc/ghc/-/jobs/artifacts/master/raw/"
    "ghc-x86_64-deb9-linux-integer-simple.tar.xz?job=validate-x86_64-linux-deb9-integer-simple"
)
CABAL_HEAD_URL = "https://github.com/haskell/cabal/releases/download/cabal-head/cabal-head-{os_tag}-x86_64.tar.gz"
STACK_RELEASE_URL = "https://github.com/commercialhaskell/stack/releases/download/v{version}/stack-{version}-{build}.tar.gz"
GHCUP_RELEASE_URL = "https://downloads.haskell.org/ghcup/{version}/{arch}-{os_tag}-ghcup-{version}"

# ghc releases before this need libncurses5/libtinfo5 on linux
GHC_NCURSES_THRESHOLD = "8.3"
# stack publishes non-static linux builds from this release on
STACK_DYNAMIC_SINCE = "2.3.1"

CHOCO_STOP_TOKEN = "SetupHaskellStopCommands"

ARCH_STRINGS = {Arch.X64: "x86_64", Arch.ARM64: "aarch64"}
CABAL_HEAD_OS_TAGS = {OS.LINUX: "Linux", OS.DARWIN: "macOS", OS.WIN32: "Windows"}


def version_before(version: str, bound: str) -> Optional[bool]:
    """``version < bound``, or ``None`` if ``version`` is not a release number."""
    try:
        return Version(version) < Version(bound)
    except InvalidVersion:
        return None


def _always(tool: Tool, version: str) -> bool:
    return True


def _is_head(tool: Tool, version: str) -> bool:
    return version == HEAD


def _is_not_head(tool: Tool, version: str) -> bool:
    return version != HEAD


def _predates_ncurses_threshold(tool: Tool, version: str) -> bool:
    return tool == Tool.GHC and version_before(version, GHC_NCURSES_THRESHOLD) is True


@dataclass(frozen=True)
class Prerequisite:
    """Apt packages a strategy needs before it can run.

    When ``required`` is False the install is attempted and its result ignored.
    """
    name: str
    packages: Tuple[str, ...]
    required: bool = True
    when: Callable[[Tool, str], bool] = _always
    extra_sources: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StrategySpec:
    """One entry of the strategy table."""
    kind: StrategyKind
    applies: Callable[[Tool, str], bool] = _always
    prerequisite: Optional[Prerequisite] = None


BUILD_ESSENTIAL = Prerequisite(
    name="build-essential (for ghc-head)",
    packages=("build-essential",),
    required=True,
)
# ubuntu-24.04 only ships these from the focal security archive
LEGACY_NCURSES = Prerequisite(
    name=f"libcurses5 and libtinfo5 (for ghc < {GHC_NCURSES_THRESHOLD})",
    packages=("libncurses5", "libtinfo5"),
    required=False,
    when=_predates_ncurses_threshold,
    extra_sources=(
        "deb https://security.ubuntu.com/ubuntu focal-security main universe",
    ),
)

GHCUP = StrategySpec(StrategyKind.GHCUP)
CHOCO = StrategySpec(StrategyKind.CHOCO)
STACK_RELEASE = StrategySpec(StrategyKind.STACK_RELEASE)

STRATEGY_TABLE: Dict[Tuple[OS, Tool], Tuple[StrategySpec, ...]] = {
    (OS.LINUX, Tool.GHC): (
        StrategySpec(StrategyKind.GHCUP_HEAD, applies=_is_head, prerequisite=BUILD_ESSENTIAL),
        StrategySpec(StrategyKind.GHCUP, applies=_is_not_head, prerequisite=LEGACY_NCURSES),
    ),
    (OS.LINUX, Tool.CABAL): (GHCUP,),
    (OS.DARWIN, Tool.GHC): (GHCUP,),
    (OS.DARWIN, Tool.CABAL): (GHCUP,),
    (OS.WIN32, Tool.GHC): (CHOCO, GHCUP),
    (OS.WIN32, Tool.CABAL): (CHOCO, GHCUP),
    # stack never goes through ghcup or chocolatey
    (OS.LINUX, Tool.STACK): (STACK_RELEASE,),
    (OS.DARWIN, Tool.STACK): (STACK_RELEASE,),
    (OS.WIN32, Tool.STACK): (STACK_RELEASE,),
}


def strategies_for(os: OS, tool: Tool) -> Tuple[StrategySpec, ...]:
    return STRATEGY_TABLE.get((os, tool), ())


def arch_string(arch: Arch) -> str:
    """Architecture name used in ghcup and stack release file names."""
    try:
        return ARCH_STRINGS[arch]
    except KeyError:
        raise UnsupportedPlatformError(f"Unsupported architecture: {arch}")


def stack_build(version: str, os: OS, arch: Arch) -> str:
    """Platform part of a stack release file name."""
    bin_arch = arch_string(arch)
    if os == OS.LINUX:
        static = "-static" if version_before(version, STACK_DYNAMIC_SINCE) else ""
        return f"linux-{bin_arch}{static}"
    if os == OS.DARWIN:
        return f"osx-{bin_arch}"
    return "windows-x86_64"


class StrategyRunner:
    """Executes install strategies for one runner platform."""

    def __init__(self,
                 os: OS,
                 arch: Arch,
                 runner: ProcessRunner,
                 tool_cache: ToolCache,
                 actions: ActionsClient,
                 table: VersionTable,
                 paths: PathsConfig):
        self.logger = logging.getLogger(__name__)
        self.os = os
        self.arch = arch
        self.runner = runner
        self.tool_cache = tool_cache
        self.actions = actions
        self.table = table
        self.paths = paths

    async def run(self, spec: StrategySpec, tool: Tool, version: str) -> StrategyOutcome:
        """
        Attempt one strategy.

        Args:
            spec: Strategy table entry
            tool: Tool to install
            version: Resolved version

        Returns:
            DECLINED if the entry does not apply, ERRORED if an installer, a
            required prerequisite, a download or the tool cache failed,
            SUCCEEDED otherwise
        """
        if not spec.applies(tool, version):
            return StrategyOutcome.DECLINED

        prerequisite = spec.prerequisite
        if prerequisite and prerequisite.when(tool, version):
            installed = await self.apt_install(prerequisite)
            if not installed and prerequisite.required:
                self.logger.info(f"Skipping {spec.kind.value} for {tool.value} {version}: {prerequisite.name} unavailable")
                return StrategyOutcome.ERRORED

        try:
            if spec.kind == StrategyKind.GHCUP:
                ok = await self.ghcup_install(tool, version)
            elif spec.kind == StrategyKind.GHCUP_HEAD:
                ok = await self.ghcup_ghc_head()
            elif spec.kind == StrategyKind.CHOCO:
                ok = await self.choco_install(tool, version)
            elif spec.kind == StrategyKind.STACK_RELEASE:
                ok = await self.stack_install(version)
            else:
                raise ValueError(f"Unknown strategy: {spec.kind}")
        except (ToolCacheError, OSError) as e:
            # Download, extraction and cache copy failures end this strategy only
            self.logger.debug(f"{spec.kind.value} for {tool.value} {version} failed: {e}")
            ok = False
        return StrategyOutcome.SUCCEEDED if ok else StrategyOutcome.ERRORED

    async def ghcup_bin(self) -> str:
        """Path of the pinned ghcup binary, downloading it into the tool cache if needed."""
        if self.os == OS.WIN32:
            return "ghcup"
        version = self.table.ghcup_version
        cached = self.tool_cache.find("ghcup", version)
        if cached:
            return str(cached / "ghcup")

        os_tag = "apple-darwin" if self.os == OS.DARWIN else "linux"
        url = GHCUP_RELEASE_URL.format(version=version, arch=arch_string(self.arch), os_tag=os_tag)
        downloaded = await self.tool_cache.download_tool(url)
        downloaded.chmod(0o755)
        return str(self.tool_cache.cache_file(downloaded, "ghcup", "ghcup", version) / "ghcup")

    async def ghcup(self, args: Sequence[str]) -> int:
        """Run ghcup with ``args``."""
        return await self.runner.exec(await self.ghcup_bin(), args)

    async def add_release_channel(self, channel: str) -> int:
        self.logger.info(f"Adding ghcup release channel: {channel}")
        return await self.ghcup(["config", "add-release-channel", channel])

    async def ghcup_install(self, tool: Tool, version: str) -> bool:
        self.logger.info(f"Attempting to install {tool.value} {version} using ghcup")
        if tool == Tool.CABAL and version == HEAD:
            url = CABAL_HEAD_URL.format(os_tag=CABAL_HEAD_OS_TAGS[self.os])
            return await self._ghcup_install_url(tool, url)

        if await self.ghcup(["install", tool.value, version]) != 0:
            return False
        return await self.ghcup(["set", tool.value, version]) == 0

    async def ghcup_ghc_head(self) -> bool:
        self.logger.info("Attempting to install ghc head using ghcup")
        return await self._ghcup_install_url(Tool.GHC, GHC_HEAD_URL)

    async def _ghcup_install_url(self, tool: Tool, url: str) -> bool:
        if await self.ghcup(["install", tool.value, "-u", url, HEAD]) != 0:
            return False
        return await self.ghcup(["set", tool.value, HEAD]) == 0

    async def apt_install(self, prerequisite: Prerequisite) -> bool:
        """Install apt packages with sudo; True if apt-get succeeded."""
        self.logger.info(f"Installing {prerequisite.name} using apt-get")
        for source in prerequisite.extra_sources:
            list_file = "/etc/apt/sources.list.d/ubuntu-focal-sources.list"
            await self.runner.exec("sudo", ["--", "sh", "-c", f"echo '{source}' > {list_file}"])
        packages = " ".join(prerequisite.packages)
        return_code = await self.runner.exec(
            "sudo", ["--", "sh", "-c", f"apt-get update && apt-get -y install {packages}"]
        )
        return return_code == 0

    async def choco_install(self, tool: Tool, version: str) -> bool:
        self.logger.info(f"Attempting to install {tool.value} {version} using chocolatey")

        # E.g. GHC 7.10.3 on chocolatey is revision 7.10.3.1
        revision = release_revision(version, tool, OS.WIN32, self.table)
        args: List[str] = [
            "choco", "install", tool.value,
            "--version", revision,
            # Locating the install directory relies on this (deprecated) option
            "--allow-multiple-versions",
            # Installing ghc must not pull in a cabal of chocolatey's choosing
            "--ignore-dependencies" if tool == Tool.GHC else "",
            "--no-progress",
            "--debug" if self.actions.is_debug() else "--limit-output",
        ]

        # Older ghc packages call the removed add-path command
        self.actions.stop_commands(CHOCO_STOP_TOKEN)
        try:
            return_code = await self.runner.exec("powershell", args)
            if return_code != 0:
                return_code = await self.runner.exec("powershell", [*args, "--pre"])
        finally:
            self.actions.resume_commands(CHOCO_STOP_TOKEN)

        # ghc is needed on PATH before the step ends
        if tool == Tool.GHC:
            for root in choco_roots(tool, version, revision, self.paths):
                bin_dir = find_choco_bin(root, tool)
                if bin_dir:
                    self.actions.add_path(bin_dir)
                    break
        return return_code == 0

    async def stack_install(self, version: str) -> bool:
        build = stack_build(version, self.os, self.arch)
        self.logger.info(f"Attempting to install stack {version} for arch {arch_string(self.arch)}")
        url = STACK_RELEASE_URL.format(version=version, build=build)

        archive = await self.tool_cache.download_tool(url)
        extracted = self.tool_cache.extract_tar(archive)
        candidates = sorted(p for p in extracted.iterdir() if p.name.startswith("stack"))
        if not candidates:
            self.logger.debug(f"No stack entry found in {url}")
            return False

        stack_path = candidates[0]
        if stack_path.is_dir():
            self.tool_cache.cache_dir(stack_path, Tool.STACK.value, version)
        else:
            self.tool_cache.cache_file(stack_path, stack_path.name, Tool.STACK.value, version)
        return True

"""Shared fixtures for the setup tests."""

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from config.settings import PathsConfig
from setup_haskell.core.installer import ToolInstaller
from setup_haskell.core.process_runner import ProcessRunner
from setup_haskell.core.strategies import StrategyRunner
from setup_haskell.core.tool_cache import ToolCache
from setup_haskell.core.version_table import VersionTable
from setup_haskell.integrations.actions import MockActionsClient
from setup_haskell.models.tool import Arch, OS

GHCUP_VERSION = "0.1.50.2"


class FakeRunner(ProcessRunner):
    """Records commands instead of running them.

    ``handler`` receives the argv list and returns the exit code; it may
    create files to simulate an installer's side effects.
    """

    def __init__(self, handler: Optional[Callable[[List[str]], int]] = None, help_text: str = ""):
        super().__init__()
        self.calls: List[List[str]] = []
        self.handler = handler or (lambda argv: 0)
        self.help_text = help_text

    async def exec(self, cmd: str, args: Sequence[str] = (), silent: bool = False) -> int:
        argv = [cmd, *[a for a in args if a]]
        self.calls.append(argv)
        return self.handler(argv)

    async def capture(self, cmd: str, args: Sequence[str] = ()) -> Tuple[int, str]:
        self.calls.append([cmd, *args])
        return 0, self.help_text

    def ghcup_calls(self) -> List[List[str]]:
        """ghcup invocations without the binary path."""
        return [argv[1:] for argv in self.calls if Path(argv[0]).name == "ghcup"]


@pytest.fixture
def table() -> VersionTable:
    return VersionTable.from_documents(
        {
            "ghc": ["9.4.8", "9.4.7", "8.10.7", "8.10.2", "8.8.4", "7.10.3"],
            "cabal": ["3.10.3.0", "3.8.1.0"],
            "stack": ["2.15.7", "2.11.1", "2.1.3"],
            "ghcup": [GHCUP_VERSION],
        },
        {
            "win32": {
                "ghc": [{"from": "7.10.3", "to": "7.10.3.1"}],
                "cabal": [],
                "stack": [],
            }
        },
    )


@pytest.fixture
def paths(tmp_path: Path) -> PathsConfig:
    home = tmp_path / "home"
    home.mkdir()
    return PathsConfig(
        home=home,
        tool_cache=tmp_path / "toolcache",
        temp=tmp_path / "temp",
        stack_root=None,
        chocolatey_tools_location=str(tmp_path / "tools"),
        chocolatey_install=str(tmp_path / "choco"),
        system_drive="C:",
    )


@pytest.fixture
def tool_cache(paths: PathsConfig) -> ToolCache:
    return ToolCache(paths.tool_cache, paths.temp, "x64")


@pytest.fixture
def actions() -> MockActionsClient:
    return MockActionsClient()


def seed_cache(cache: ToolCache, tool: str, version: str, files: Sequence[str] = ()) -> Path:
    """Create a complete tool cache entry holding empty ``files``."""
    entry = cache.entry_path(tool, version)
    entry.mkdir(parents=True, exist_ok=True)
    for name in files:
        (entry / name).write_text("")
    (entry.parent / f"{cache.arch}.complete").write_text("")
    return entry


@pytest.fixture
def seeded_ghcup(tool_cache: ToolCache) -> Path:
    """A cached ghcup binary so no test downloads one."""
    return seed_cache(tool_cache, "ghcup", GHCUP_VERSION, ["ghcup"])


def make_installer(os: OS, runner: FakeRunner, tool_cache: ToolCache, actions: MockActionsClient,
                   table: VersionTable, paths: PathsConfig, arch: Arch = Arch.X64) -> ToolInstaller:
    strategies = StrategyRunner(os, arch, runner, tool_cache, actions, table, paths)
    return ToolInstaller(os, arch, strategies, actions, table, paths)

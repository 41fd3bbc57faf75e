"""
Core modules for the Haskell toolchain setup.
"""

from .errors import ConfigurationError, InputParseError, InstallationFailedError, SetupError
from .installer import ToolInstaller
from .options import get_defaults, get_opts
from .resolver import release_revision, resolve
from .runner import SetupRunner
from .strategies import STRATEGY_TABLE, StrategyRunner
from .tool_cache import ToolCache
from .version_table import VersionTable, load_version_table

__all__ = [
    "ConfigurationError",
    "InputParseError",
    "InstallationFailedError",
    "SetupError",
    "ToolInstaller",
    "get_defaults",
    "get_opts",
    "release_revision",
    "resolve",
    "SetupRunner",
    "STRATEGY_TABLE",
    "StrategyRunner",
    "ToolCache",
    "VersionTable",
    "load_version_table",
]

"""
Data models for the Haskell toolchain setup.
"""

from .tool import (
    Arch,
    CabalOpt,
    Defaults,
    GeneralOpt,
    GhcupOpt,
    MatcherOpt,
    OS,
    Options,
    ProgramOpt,
    StackOpt,
    Tool,
    VersionDefault,
)
from .installation import (
    InstallAttempt,
    InstallationResult,
    Probe,
    ProbeKind,
    RunSummary,
    StrategyKind,
    StrategyOutcome,
)

__all__ = [
    "Arch",
    "CabalOpt",
    "Defaults",
    "GeneralOpt",
    "GhcupOpt",
    "MatcherOpt",
    "OS",
    "Options",
    "ProgramOpt",
    "StackOpt",
    "Tool",
    "VersionDefault",
    "InstallAttempt",
    "InstallationResult",
    "Probe",
    "ProbeKind",
    "RunSummary",
    "StrategyKind",
    "StrategyOutcome",
]

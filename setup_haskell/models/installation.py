"""
Installation attempt, probe and run result models.
"""

from enum import Enum
from typing import Optional, Dict, List
from datetime import datetime
from pydantic import BaseModel, Field

from .tool import Arch, OS, Tool


class StrategyKind(str, Enum):
    """Install strategies the orchestrator can try."""
    GHCUP = "ghcup"
    GHCUP_HEAD = "ghcup_head"
    CHOCO = "choco"
    STACK_RELEASE = "stack_release"


class StrategyOutcome(str, Enum):
    """Result of a single strategy attempt.

    DECLINED means the strategy does not apply to the request; ERRORED means
    an installer invocation (or a required prerequisite) returned non-zero;
    SUCCEEDED means every invocation returned zero. Only the follow-up
    verification decides whether the tool is installed.
    """
    DECLINED = "declined"
    ERRORED = "errored"
    SUCCEEDED = "succeeded"


class ProbeKind(str, Enum):
    """How a located install path has to be verified."""
    UNAMBIGUOUS = "unambiguous"
    MULTI_VERSION = "multi_version"


class Probe(BaseModel):
    """A well-known location that may hold an installed tool."""
    path: str = Field(..., description="Directory holding the tool binary")
    kind: ProbeKind = Field(..., description="Verification needed for this location")

    class Config:
        frozen = True


class InstallAttempt(BaseModel):
    """One (tool, strategy) try. Never persisted."""
    tool: Tool
    version: str
    os: OS
    arch: Arch
    strategy: StrategyKind
    outcome: Optional[StrategyOutcome] = None
    verified: bool = False


class InstallationResult(BaseModel):
    """Outcome of installing a single tool."""
    tool: Tool = Field(..., description="Tool identifier")
    version: str = Field(..., description="Resolved version")
    success: bool = Field(default=False, description="Whether the tool was verified installed")
    path: Optional[str] = Field(None, description="Directory the tool was found in")
    from_cache: bool = Field(default=False, description="Found without running any strategy")
    attempts: List[InstallAttempt] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "tool": "ghc",
                "version": "9.4.8",
                "success": True,
                "path": "/home/runner/.ghcup/bin",
                "from_cache": False,
                "attempts": [
                    {"tool": "ghc", "version": "9.4.8", "os": "linux", "arch": "x64",
                     "strategy": "ghcup", "outcome": "succeeded", "verified": True}
                ]
            }
        }


class RunSummary(BaseModel):
    """Summary of a whole setup run."""
    success: bool = False
    error: Optional[str] = None
    results: Dict[str, InstallationResult] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    def complete(self, success: bool, error: Optional[str] = None) -> None:
        """Mark the run as complete."""
        self.success = success
        self.error = error
        self.completed_at = datetime.utcnow()
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

"""
Tool, platform and per-tool option models.
"""

from enum import Enum
from typing import Tuple

from pydantic import AnyUrl, BaseModel, Field


class Tool(str, Enum):
    """Tools provisioned by the setup step, in installation order."""
    GHC = "ghc"
    CABAL = "cabal"
    STACK = "stack"


class OS(str, Enum):
    """Runner operating systems, named the way the runner reports them."""
    LINUX = "linux"
    DARWIN = "darwin"
    WIN32 = "win32"


class Arch(str, Enum):
    """Runner CPU architectures."""
    X64 = "x64"
    ARM64 = "arm64"


class ProgramOpt(BaseModel):
    """Requested and resolved version of a single tool."""
    enable: bool = Field(..., description="Whether the tool is installed at all")
    raw: str = Field(..., description="Version token as requested by the user")
    resolved: str = Field(..., description="Version after resolution against the version table")

    class Config:
        frozen = True


class CabalOpt(ProgramOpt):
    """Options for cabal."""
    update: bool = Field(..., description="Run `cabal update` after setup")


class StackOpt(ProgramOpt):
    """Options for stack."""
    setup: bool = Field(..., description="Pre-install GHC through `stack setup`")


class GhcupOpt(BaseModel):
    """Options for the ghcup installer itself."""
    release_channels: Tuple[AnyUrl, ...] = Field(
        default_factory=tuple,
        description="Extra release channels, registered in order"
    )

    class Config:
        frozen = True


class MatcherOpt(BaseModel):
    enable: bool = True

    class Config:
        frozen = True


class GeneralOpt(BaseModel):
    matcher: MatcherOpt = Field(default_factory=MatcherOpt)

    class Config:
        frozen = True


class Options(BaseModel):
    """Fully resolved and cross-validated setup configuration."""
    ghc: ProgramOpt
    cabal: CabalOpt
    stack: StackOpt
    ghcup: GhcupOpt = Field(default_factory=GhcupOpt)
    general: GeneralOpt = Field(default_factory=GeneralOpt)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "ghc": {"enable": True, "raw": "9.4", "resolved": "9.4.8"},
                "cabal": {"enable": True, "raw": "latest", "resolved": "3.14.2.0", "update": True},
                "stack": {"enable": False, "raw": "latest", "resolved": "3.5.1", "setup": False},
                "ghcup": {"release_channels": []},
                "general": {"matcher": {"enable": True}}
            }
        }

    def program(self, tool: Tool) -> ProgramOpt:
        """Return the options of ``tool``."""
        return getattr(self, tool.value)

    def enabled_tools(self) -> Tuple[Tool, ...]:
        """Enabled tools in installation order."""
        return tuple(t for t in Tool if self.program(t).enable)


class VersionDefault(BaseModel):
    """Default version of a tool together with its supported versions."""
    version: str
    supported: Tuple[str, ...]

    class Config:
        frozen = True


class Defaults(BaseModel):
    """Per-tool defaults used when an input is left empty."""
    ghc: VersionDefault
    cabal: VersionDefault
    stack: VersionDefault
    general: GeneralOpt = Field(default_factory=GeneralOpt)

    class Config:
        frozen = True

    def for_tool(self, tool: Tool) -> VersionDefault:
        return getattr(self, tool.value)


"""
Configuration settings for the Haskell toolchain setup.
"""

import os
from typing import Optional
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings

from setup_haskell.models.tool import Arch, OS


class InputDefaults(BaseModel):
    """Default version tokens used when an action input is left empty."""
    ghc_version: str = Field(default="latest", description="Default ghc-version input")
    cabal_version: str = Field(default="latest", description="Default cabal-version input")
    stack_version: str = Field(default="latest", description="Default stack-version input")


class PathsConfig(BaseModel):
    """Well-known runner locations."""
    home: Path = Field(default_factory=Path.home, description="User home directory")
    tool_cache: Path = Field(
        default_factory=lambda: Path(os.environ.get("RUNNER_TOOL_CACHE") or Path.home() / ".tool-cache"),
        description="Root of the versioned tool cache"
    )
    temp: Path = Field(
        default_factory=lambda: Path(os.environ.get("RUNNER_TEMP") or Path.home() / ".tool-cache" / "tmp"),
        description="Scratch directory for downloads"
    )
    stack_root: Optional[str] = Field(
        default_factory=lambda: os.environ.get("STACK_ROOT"),
        description="STACK_ROOT override"
    )
    chocolatey_tools_location: Optional[str] = Field(
        default_factory=lambda: os.environ.get("ChocolateyToolsLocation"),
        description="Directory chocolatey extracts tools into"
    )
    chocolatey_install: str = Field(
        default_factory=lambda: os.environ.get("ChocolateyInstall", "C:\\ProgramData\\chocolatey"),
        description="Chocolatey installation directory"
    )
    system_drive: str = Field(
        default_factory=lambda: os.environ.get("SystemDrive", "C:"),
        description="Windows system drive"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="%(message)s", description="Log format")
    file_path: Optional[Path] = Field(default=None, description="Optional rotating log file")
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")


class Settings(BaseSettings):
    """Main application settings."""
    defaults: InputDefaults = Field(default_factory=InputDefaults)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Static data
    versions_file: Optional[Path] = Field(default=None, description="Override for versions.json")
    revisions_file: Optional[Path] = Field(default=None, description="Override for release-revisions.json")

    # Operational settings
    runner_debug: bool = Field(default=False, description="Runner debug logging (RUNNER_DEBUG)")
    os_override: Optional[OS] = Field(default=None, description="Force the detected OS")
    arch_override: Optional[Arch] = Field(default=None, description="Force the detected architecture")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Ignore extra fields from environment

    @validator('os_override', pre=True)
    def normalize_os(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if not v:
                return None
            return {"windows": "win32", "macos": "darwin"}.get(v, v)
        return v

    @validator('arch_override', pre=True)
    def normalize_arch(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if not v:
                return None
            return {"x86_64": "x64", "amd64": "x64", "aarch64": "arm64"}.get(v, v)
        return v

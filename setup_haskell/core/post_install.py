"""
Post-install configuration of cabal and stack.
"""

import logging
from pathlib import Path
from typing import Optional

from config.settings import PathsConfig

from ..integrations.actions import ActionsClient
from ..models.tool import OS, Options
from .process_runner import ProcessRunner

# ghc 7.10.3 fails to link on PIE-by-default toolchains
NO_PIE_GHC_VERSION = "7.10.3"


def config_file_from_help(help_text: str) -> Optional[str]:
    """
    Extract the cabal config file path from ``cabal --help`` output.

    The help text ends with::

        You can edit the cabal configuration file to set defaults:
          <<HOME>>/.cabal/config
    """
    lines = [line.strip() for line in help_text.strip().splitlines() if line.strip()]
    return lines[-1] if lines else None


class PostInstallConfigurator:
    """Wires up the installed environment: stack setup, cabal config, PATH."""

    def __init__(self, os: OS, runner: ProcessRunner, actions: ActionsClient, paths: PathsConfig):
        self.logger = logging.getLogger(__name__)
        self.os = os
        self.runner = runner
        self.actions = actions
        self.paths = paths

    @property
    def cabal_store_dir(self) -> str:
        if self.os == OS.WIN32:
            return "C:\\sr"
        return f"{self.paths.home}/.cabal/store"

    @property
    def cabal_bin_dir(self) -> str:
        return f"{self.paths.home}/.cabal/bin"

    async def stack_setup(self, ghc_version: str) -> int:
        """Pre-install ghc through stack."""
        return await self.runner.exec("stack", ["setup", ghc_version])

    async def cabal_config_file(self) -> Optional[str]:
        _, output = await self.runner.capture("cabal", ["--help"])
        return config_file_from_help(output)

    async def setup_cabal(self, opts: Options) -> None:
        """
        Prepare cabal's user configuration.

        The config file is only ever appended to; cabal picks the last
        definition of an option.
        """
        if self.os != OS.WIN32:
            # ~/.cabal/bin keeps cabal in non-XDG mode
            Path(self.cabal_bin_dir).mkdir(parents=True, exist_ok=True)

        # Creates the config only if it does not exist yet
        await self.runner.exec("cabal", ["user-config", "init"], silent=True)

        config_file = await self.cabal_config_file()
        if not config_file:
            self.logger.warning("Could not determine the cabal configuration file")
        else:
            self._append(config_file, f"store-dir: {self.cabal_store_dir}")
        self.actions.set_output("cabal-store", self.cabal_store_dir)

        if self.os == OS.WIN32:
            # Some Windows versions cannot symlink
            if config_file:
                self._append(config_file, "install-method: copy")
                self._append(config_file, "overwrite-policy: always")
        else:
            self.logger.info(f"Adding {self.cabal_bin_dir} to PATH")
            self.actions.add_path(self.cabal_bin_dir)

        if config_file and opts.ghc.resolved == NO_PIE_GHC_VERSION and self.os != OS.WIN32:
            self._append(config_file, "\n".join([
                "program-default-options",
                "  ghc-options: -optl-no-pie",
            ]))

        if opts.cabal.update and not opts.stack.enable:
            await self.runner.exec("cabal", ["update"])

    async def configure(self, opts: Options) -> None:
        """Run every post-install step that applies to ``opts``."""
        if opts.stack.setup:
            async with self.actions.group("Pre-installing GHC with stack"):
                await self.stack_setup(opts.ghc.resolved)

        if opts.cabal.enable:
            async with self.actions.group("Setting up cabal"):
                await self.setup_cabal(opts)

    def _append(self, config_file: str, text: str) -> None:
        with open(config_file, "a", encoding="utf-8") as f:
            f.write(f"{text}\n")

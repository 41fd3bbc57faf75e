#!/usr/bin/env python3
"""
Main entry point for setting up a Haskell toolchain on a CI runner.
"""

import asyncio
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from config.settings import Settings
from setup_haskell.core.runner import SetupRunner
from setup_haskell.integrations.actions import ActionsClient
from setup_haskell.utils.logging import setup_root_logger

INPUT_NAMES = (
    "ghc-version",
    "cabal-version",
    "stack-version",
    "enable-stack",
    "stack-no-global",
    "stack-setup-ghc",
    "cabal-update",
    "enable-matcher",
    "disable-matcher",
    "ghcup-release-channels",
    "ghcup-release-channel",
)


def read_env_inputs(environ: Mapping[str, str]) -> Dict[str, str]:
    """Collect action inputs the way the runner passes them (``INPUT_<NAME>``)."""
    inputs = {}
    for name in INPUT_NAMES:
        value = environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
        if value:
            inputs[name] = value
    return inputs


def parse_arguments(argv: Optional[list] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Set up ghc, cabal and stack on a CI runner"
    )

    for name in INPUT_NAMES:
        parser.add_argument(
            f"--{name}",
            dest=name.replace("-", "_"),
            type=str,
            default=None,
            help=f"Override the {name} action input"
        )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from settings, DEBUG when RUNNER_DEBUG=1)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a rotating log file"
    )

    return parser.parse_args(argv)


def collect_inputs(args, environ: Mapping[str, str]) -> Dict[str, str]:
    """Environment inputs overridden by command line arguments."""
    inputs = read_env_inputs(environ)
    for name in INPUT_NAMES:
        value = getattr(args, name.replace("-", "_"))
        if value is not None:
            inputs[name] = value
    return inputs


async def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    settings = Settings()

    level = args.log_level or ("DEBUG" if settings.runner_debug else settings.logging.level)
    setup_root_logger(
        args.log_file or settings.logging.file_path,
        level,
        settings.logging.format,
        settings.logging.max_file_size_mb,
        settings.logging.backup_count,
    )
    logger = logging.getLogger(__name__)

    inputs = collect_inputs(args, os.environ)
    logger.debug(f"Inputs: {inputs}")

    actions = ActionsClient()
    runner = SetupRunner(settings=settings, actions=actions)
    summary = await runner.run(inputs)

    for tool, result in summary.results.items():
        logger.debug(f"{tool}: {result.model_dump_json()}")
    if summary.duration_seconds is not None:
        logger.debug(f"Duration: {summary.duration_seconds:.2f} seconds")

    return actions.exit_code


def cli():
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()

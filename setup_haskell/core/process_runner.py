"""
Process runner for invoking external installers.
"""

import asyncio
import logging
from typing import Dict, Optional, Sequence, Tuple

# Exit status reported when the executable cannot be started at all
NOT_FOUND_RETURN_CODE = 127


class ProcessRunner:
    """Runs external commands one at a time and reports their exit status.

    A non-zero exit is never raised; callers decide what a failure means.
    There is no timeout: a hung installer hangs the caller.
    """

    def __init__(self, env: Optional[Dict[str, str]] = None):
        """
        Initialize the runner.

        Args:
            env: Environment for child processes (inherits the current one when None)
        """
        self.logger = logging.getLogger(__name__)
        self.env = env

    async def exec(self, cmd: str, args: Sequence[str] = (), silent: bool = False) -> int:
        """
        Run ``cmd`` with ``args`` and wait for it to exit.

        Args:
            cmd: Executable
            args: Arguments
            silent: Discard the child's output instead of streaming it

        Returns:
            Exit code of the process
        """
        argv = [cmd, *[a for a in args if a]]
        self.logger.debug(f"Running: {' '.join(argv)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.DEVNULL if silent else None,
                stderr=asyncio.subprocess.DEVNULL if silent else None,
                env=self.env
            )
        except OSError as e:
            self.logger.debug(f"Unable to start {cmd}: {e}")
            return NOT_FOUND_RETURN_CODE

        return_code = await process.wait()
        self.logger.debug(f"{cmd} exited with code {return_code}")
        return return_code

    async def capture(self, cmd: str, args: Sequence[str] = ()) -> Tuple[int, str]:
        """
        Run ``cmd`` and collect its combined stdout and stderr.

        Returns:
            Exit code and decoded output
        """
        argv = [cmd, *[a for a in args if a]]
        self.logger.debug(f"Capturing: {' '.join(argv)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                env=self.env
            )
        except OSError as e:
            self.logger.debug(f"Unable to start {cmd}: {e}")
            return NOT_FOUND_RETURN_CODE, ""

        stdout, _ = await process.communicate()
        return process.returncode, stdout.decode(errors="replace") if stdout else ""

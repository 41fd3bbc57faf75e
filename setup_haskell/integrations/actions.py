"""
GitHub Actions integration: outputs, PATH and environment updates, log groups.
"""

import logging
import os
import sys
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, TextIO


class ActionsClient:
    """Client for the GitHub Actions runner file and workflow command protocol."""

    def __init__(self, environ: Optional[Dict[str, str]] = None, stream: Optional[TextIO] = None):
        """
        Initialize the client.

        Args:
            environ: Environment to read runner files from and update (defaults to ``os.environ``)
            stream: Stream workflow commands are written to (defaults to stdout)
        """
        self.logger = logging.getLogger(__name__)
        self.environ = os.environ if environ is None else environ
        self.stream = stream
        self.exit_code = 0

    def is_debug(self) -> bool:
        """Whether runner debug logging is enabled."""
        return self.environ.get("RUNNER_DEBUG") == "1"

    def set_output(self, name: str, value: Any) -> None:
        """Set a step output."""
        value = _to_command_value(value)
        if not self._append_file("GITHUB_OUTPUT", _key_value_message(name, value)):
            self._command("set-output", value, name=name)

    def add_path(self, path: str) -> None:
        """Prepend ``path`` to PATH for this and all later steps."""
        if not self._append_file("GITHUB_PATH", path):
            self._command("add-path", path)
        self.environ["PATH"] = f"{path}{os.pathsep}{self.environ.get('PATH', '')}"

    def export_variable(self, name: str, value: Any) -> None:
        """Set an environment variable for this and all later steps."""
        value = _to_command_value(value)
        self.environ[name] = value
        if not self._append_file("GITHUB_ENV", _key_value_message(name, value)):
            self._command("set-env", value, name=name)

    def set_failed(self, message: str) -> None:
        """Log ``message`` as an error and mark the step as failed."""
        self.exit_code = 1
        self.logger.error(message)

    def add_matcher(self, path: Path) -> None:
        """Register a problem matcher file."""
        self._write(f"##[add-matcher]{path}")

    def stop_commands(self, token: str) -> None:
        """Stop processing workflow commands until :meth:`resume_commands` is called."""
        self._write(f"::stop-commands::{token}")

    def resume_commands(self, token: str) -> None:
        self._write(f"::{token}::")

    @asynccontextmanager
    async def group(self, title: str) -> AsyncIterator[None]:
        """Fold all output produced inside the block into a collapsible group."""
        self._write(f"::group::{title}")
        try:
            yield
        finally:
            self._write("::endgroup::")

    def _append_file(self, variable: str, line: str) -> bool:
        file_path = self.environ.get(variable)
        if not file_path:
            return False
        with open(file_path, "a", encoding="utf-8") as f:
            f.write(f"{line}{os.linesep}")
        return True

    def _command(self, command: str, message: str, **properties: str) -> None:
        props = ",".join(f"{k}={v}" for k, v in properties.items())
        self._write(f"::{command}{' ' + props if props else ''}::{message}")

    def _write(self, line: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(f"{line}\n")
        stream.flush()


class MockActionsClient(ActionsClient):
    """Records every interaction instead of talking to a runner."""

    def __init__(self, debug: bool = False, environ: Optional[Dict[str, str]] = None):
        super().__init__(environ={} if environ is None else environ)
        self.debug = debug
        self.outputs: Dict[str, str] = {}
        self.paths: List[str] = []
        self.variables: Dict[str, str] = {}
        self.groups: List[str] = []
        self.commands: List[str] = []
        self.failures: List[str] = []

    def is_debug(self) -> bool:
        return self.debug

    def set_output(self, name: str, value: Any) -> None:
        self.outputs[name] = _to_command_value(value)
        self.logger.info(f"[MOCK] Output {name}={self.outputs[name]}")

    def add_path(self, path: str) -> None:
        self.paths.append(path)
        self.environ["PATH"] = f"{path}{os.pathsep}{self.environ.get('PATH', '')}"

    def export_variable(self, name: str, value: Any) -> None:
        self.variables[name] = _to_command_value(value)
        self.environ[name] = self.variables[name]

    def set_failed(self, message: str) -> None:
        self.failures.append(message)
        super().set_failed(message)

    @asynccontextmanager
    async def group(self, title: str) -> AsyncIterator[None]:
        self.groups.append(title)
        yield

    def _write(self, line: str) -> None:
        self.commands.append(line)


def _to_command_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _key_value_message(name: str, value: str) -> str:
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}"


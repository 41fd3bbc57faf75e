"""Tests for workflow command logging."""

import io
import logging

import pytest

from setup_haskell.utils.logging import WorkflowCommandHandler, setup_root_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def emit(level, message):
    stream = io.StringIO()
    handler = WorkflowCommandHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger(f"test.workflow.{level}")
    logger.propagate = False
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG)
    logger.log(level, message)
    return stream.getvalue()


def test_info_is_plain():
    assert emit(logging.INFO, "Preparing to setup a Haskell environment") == (
        "Preparing to setup a Haskell environment\n"
    )


def test_levels_map_to_commands():
    assert emit(logging.DEBUG, "probe") == "::debug::probe\n"
    assert emit(logging.WARNING, "deprecated") == "::warning::deprecated\n"
    assert emit(logging.ERROR, "failed") == "::error::failed\n"
    assert emit(logging.CRITICAL, "fatal") == "::error::fatal\n"


def test_command_data_is_escaped():
    assert emit(logging.ERROR, "first\nsecond 100%") == "::error::first%0Asecond 100%25\n"


def test_setup_root_logger(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "setup.log"

    setup_root_logger(log_file, "DEBUG")

    kinds = [type(h).__name__ for h in restore_root_logger.handlers]
    assert kinds == ["WorkflowCommandHandler", "RotatingFileHandler"]
    assert restore_root_logger.level == logging.DEBUG
    assert log_file.parent.is_dir()

"""
Utility modules for the Haskell toolchain setup.
"""

from .logging import WorkflowCommandHandler, setup_root_logger

__all__ = ["WorkflowCommandHandler", "setup_root_logger"]

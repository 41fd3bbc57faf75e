"""
Integration modules for external services.
"""

from .actions import ActionsClient, MockActionsClient

__all__ = ["ActionsClient", "MockActionsClient"]

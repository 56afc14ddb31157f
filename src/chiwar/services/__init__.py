"""Service layer for CLI commands."""

from .auth import AuthService
from .encounters import CommandError, CommandResult, EncounterService, LineKind

__all__ = [
    "AuthService",
    "CommandError",
    "CommandResult",
    "EncounterService",
    "LineKind",
]

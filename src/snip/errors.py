"""
Error types for snip.

Every error carries the exit status the CLI should terminate with, so
command handlers can map failures to the shell without a lookup table.
"""

from typing import Optional

from snip.taxonomy import ExitStatus


class SnipError(Exception):
    """Base class for user-facing snip failures."""

    exit_code: int = ExitStatus.FAILURE

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


class SnippetNotFound(SnipError):
    """No stored snippet matches the requested id or name."""

    def __init__(self, id_or_name: str):
        super().__init__(f'Snippet not found: "{id_or_name}"')
        self.id_or_name = id_or_name


class EmptySnippet(SnipError):
    """The snippet exists but has no executable content."""

    def __init__(self, name: str):
        super().__init__(f'Snippet "{name}" is empty.')
        self.name = name


class InterpreterNotFound(SnipError):
    """The resolved interpreter command is not on the system path."""

    exit_code = ExitStatus.NOT_FOUND

    def __init__(self, command: str, language: Optional[str] = None):
        super().__init__(f'Interpreter not found for "{language or "shell"}": {command}')
        self.command = command
        self.language = language


class SpawnFailure(SnipError):
    """The interpreter process could not be created."""

    def __init__(self, reason: str):
        super().__init__(f"Failed to execute snippet: {reason}")
        self.reason = reason


class DangerousContentBlocked(SnipError):
    """The danger classifier flagged the snippet and the user did not confirm."""

    exit_code = ExitStatus.BLOCKED

    def __init__(self, name: Optional[str] = None):
        target = f'"{name}"' if name else "snippet"
        super().__init__(f"Aborted: {target} contains potentially destructive commands.")
        self.name = name


class RequiredVariableMissing(SnipError):
    """A template variable without a default was left empty."""

    def __init__(self, name: str):
        super().__init__(f'Aborted: required variable "{name}" not provided.')
        self.name = name


class ConfigError(SnipError):
    """Invalid configuration key or value."""

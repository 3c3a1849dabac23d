"""Exception hierarchy shared by the editing pipeline."""

from __future__ import annotations

import signal
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import EditOutcome


class StageditError(RuntimeError):
    """Base error for failures while staging, editing or installing files."""

    # Outcomes of the files a session finished before failing.
    completed: tuple[EditOutcome, ...] = ()


class EmptySessionError(StageditError):
    """Raised when an edit session is run without any registered file."""

    def __init__(self) -> None:
        super().__init__("Got no files to edit.")


class StagingError(StageditError):
    """Raised when a staging file cannot be prepared for a target."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


class EditorError(StageditError):
    """Base error for editor resolution and execution issues."""


class NoEditorError(EditorError):
    """Raised when none of the fallback editors could be found."""

    def __init__(self, variables: tuple[str, ...]) -> None:
        names = ", ".join(f"${name}" for name in variables[:-1])
        hint = f"{names} or ${variables[-1]}" if names else f"${variables[-1]}"
        super().__init__(
            f"Cannot edit files, no editor available. Please set either {hint}."
        )
        self.variables = variables


class EditorExecutionError(EditorError):
    """Raised when an editor command exists but cannot be executed."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Failed to execute '{command}': {reason}")
        self.command = command


class EditorTerminatedError(EditorError):
    """Raised when the editor process is killed by a signal."""

    def __init__(self, command: str, signum: int) -> None:
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = f"signal {signum}"
        super().__init__(f"Editor '{command}' was terminated by {name}")
        self.command = command
        self.signum = signum


class TrimError(StageditError):
    """Raised when an edited staging file cannot be read back or rewritten."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


class InstallError(StageditError):
    """Raised when an edited file cannot be moved over its target."""

    def __init__(self, source: Path, target: Path, reason: str) -> None:
        super().__init__(f'Failed to rename "{source}" to "{target}": {reason}')
        self.source = source
        self.target = target


__all__ = [
    "EditorError",
    "EditorExecutionError",
    "EditorTerminatedError",
    "EmptySessionError",
    "InstallError",
    "NoEditorError",
    "StageditError",
    "StagingError",
    "TrimError",
]

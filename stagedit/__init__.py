"""Edit files through an external editor with staged, atomic installation."""

from __future__ import annotations

from .errors import (
    EditorError,
    EditorExecutionError,
    EditorTerminatedError,
    EmptySessionError,
    InstallError,
    NoEditorError,
    StageditError,
    StagingError,
    TrimError,
)
from .session import EditOutcome, EditRequest, EditSession, InstallStatus

__all__ = [
    "EditOutcome",
    "EditRequest",
    "EditSession",
    "EditorError",
    "EditorExecutionError",
    "EditorTerminatedError",
    "EmptySessionError",
    "InstallError",
    "InstallStatus",
    "NoEditorError",
    "StageditError",
    "StagingError",
    "TrimError",
]

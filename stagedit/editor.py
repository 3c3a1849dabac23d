"""Utilities for resolving and launching the user's editor over staging files."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_EDITOR_VARIABLE, DEFAULT_FALLBACK_EDITORS
from .errors import EditorExecutionError, EditorTerminatedError, NoEditorError

logger = logging.getLogger(__name__)

GENERIC_EDITOR_VARIABLES: tuple[str, ...] = ("EDITOR", "VISUAL")
SAFE_NOFILE_LIMIT = 1024

_RESET_SIGNALS = ("SIGHUP", "SIGINT", "SIGQUIT", "SIGTERM", "SIGPIPE")
_PR_SET_PDEATHSIG = 1


@dataclass(slots=True, frozen=True)
class EditorCommand:
    """A candidate editor invocation, without the file arguments."""

    argv: tuple[str, ...]
    source: str
    authoritative: bool = False

    @property
    def name(self) -> str:
        return self.argv[0]


def editor_variables(editor_variable: str = DEFAULT_EDITOR_VARIABLE) -> tuple[str, ...]:
    """Return the override variables in priority order."""

    return (editor_variable, *GENERIC_EDITOR_VARIABLES)


def resolve_override(
    environ: Mapping[str, str] | None = None,
    editor_variable: str = DEFAULT_EDITOR_VARIABLE,
) -> EditorCommand | None:
    """Return the command configured through the environment, if any.

    The first non-empty variable wins. Its value is split on whitespace only;
    no quoting, globbing or expansion is applied.
    """

    env = os.environ if environ is None else environ
    for variable in editor_variables(editor_variable):
        argv = env.get(variable, "").split()
        if argv:
            return EditorCommand(tuple(argv), source=variable, authoritative=True)
    return None


def iter_editor_candidates(
    environ: Mapping[str, str] | None = None,
    editor_variable: str = DEFAULT_EDITOR_VARIABLE,
    fallback_editors: Sequence[str] = DEFAULT_FALLBACK_EDITORS,
) -> Iterator[EditorCommand]:
    """Yield the commands to try, in order.

    A configured override is the only candidate; otherwise every fallback name
    is yielded.
    """

    override = resolve_override(environ, editor_variable)
    if override is not None:
        yield override
        return
    for name in fallback_editors:
        yield EditorCommand((name,), source="fallback")


def build_editor_argv(
    command: EditorCommand,
    staging_paths: Sequence[Path],
    cursor_line: int = 1,
) -> list[str]:
    """Append the jump-to-line argument and the files to ``command``.

    ``+LINE`` is only added for a single file, since it would be ambiguous
    which file it applies to otherwise.
    """

    argv = list(command.argv)
    if len(staging_paths) == 1 and cursor_line > 1:
        argv.append(f"+{cursor_line}")
    argv.extend(str(path) for path in staging_paths)
    return argv


def run_editor(
    staging_paths: Sequence[Path],
    cursor_line: int = 1,
    *,
    editor_variable: str = DEFAULT_EDITOR_VARIABLE,
    fallback_editors: Sequence[str] = DEFAULT_FALLBACK_EDITORS,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run the editor over ``staging_paths`` and wait for it to exit.

    Returns the editor's exit status. A non-zero status is not an error here.

    Raises
    ------
    EditorExecutionError
        If the override command cannot be executed, or a fallback editor
        exists but fails to start.
    NoEditorError
        If no override is set and none of the fallback editors exist.
    EditorTerminatedError
        If the editor was killed by a signal; its files may be half written.
    """

    if not staging_paths:
        raise ValueError("No files to open in the editor")

    for command in iter_editor_candidates(environ, editor_variable, fallback_editors):
        argv = build_editor_argv(command, staging_paths, cursor_line)
        logger.debug("Launching editor from %s: %s", command.source, argv)
        try:
            process = subprocess.run(
                argv,
                check=False,
                preexec_fn=_prepare_child if os.name == "posix" else None,
            )
        except FileNotFoundError as exc:
            if command.authoritative:
                raise EditorExecutionError(command.name, str(exc)) from exc
            logger.debug("Editor '%s' not found, trying next candidate", command.name)
            continue
        except OSError as exc:
            raise EditorExecutionError(command.name, str(exc)) from exc

        if process.returncode < 0:
            raise EditorTerminatedError(command.name, -process.returncode)
        if process.returncode != 0:
            logger.debug(
                "Editor '%s' exited with status %d", command.name, process.returncode
            )
        return process.returncode

    raise NoEditorError(editor_variables(editor_variable))


def _prepare_child() -> None:
    """Reset inherited process state in the editor child before exec."""

    for name in _RESET_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, signal.SIG_DFL)

    if sys.platform.startswith("linux"):
        import ctypes

        libc = ctypes.CDLL(None, use_errno=True)
        libc.prctl(_PR_SET_PDEATHSIG, int(signal.SIGTERM), 0, 0, 0)

    import resource

    soft, hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    if soft == resource.RLIM_INFINITY or soft > SAFE_NOFILE_LIMIT:
        limit = SAFE_NOFILE_LIMIT
        if hard != resource.RLIM_INFINITY:
            limit = min(limit, hard)
        resource.setrlimit(resource.RLIMIT_NOFILE, (limit, hard))


__all__ = [
    "EditorCommand",
    "GENERIC_EDITOR_VARIABLES",
    "build_editor_argv",
    "editor_variables",
    "iter_editor_candidates",
    "resolve_override",
    "run_editor",
]

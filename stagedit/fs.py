"""Filesystem helpers used while staging files."""

from __future__ import annotations

import logging
import os
import secrets
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

import pluggy

logger = logging.getLogger(__name__)

FILE_MODE = 0o644
DIRECTORY_MODE = 0o755

# Undecodable bytes survive a read/write round trip as lone surrogates.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


def random_temp_path(target: Path) -> Path:
    """Return an unpredictable hidden sibling of ``target``.

    Staying in the target's directory keeps the final rename on one filesystem.
    """

    return target.with_name(f".#{target.name}{secrets.token_hex(8)}")


def touch(path: Path, mode: int = FILE_MODE) -> None:
    path.touch(mode=mode, exist_ok=True)


def open_text(path: Path, mode: str = "r") -> IO[str]:
    """Open ``path`` for text I/O without newline translation or decode errors."""

    return path.open(mode, encoding=ENCODING, errors=ENCODING_ERRORS, newline="")


def read_text(path: Path) -> str:
    with open_text(path) as handle:
        return handle.read()


def write_text(path: Path, text: str) -> None:
    with open_text(path, "w") as handle:
        handle.write(text)


def copy_file(source: Path, destination: Path, mode: int = FILE_MODE) -> None:
    """Copy file contents only, then apply ``mode`` to the copy."""

    shutil.copyfile(source, destination)
    os.chmod(destination, mode)


def mkdir_parents(
    path: Path, plugins: pluggy.PluginManager, mode: int = DIRECTORY_MODE
) -> None:
    """Ask the registered plugins to create the ancestry of ``path``."""

    handled = plugins.hook.stagedit_mkdir_parents(path=path, mode=mode)
    if not handled:
        raise FileNotFoundError(f"No plugin created parent directories for {path}")


@contextmanager
def labelled_creation(path: Path, plugins: pluggy.PluginManager) -> Iterator[None]:
    """Bracket file creation for ``path`` with the label prepare/clear hooks."""

    plugins.hook.stagedit_create_file_prepare(path=path)
    try:
        yield
    finally:
        plugins.hook.stagedit_create_file_clear(path=path)


def remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        logger.debug("Failed to remove %s, ignoring: %s", path, exc)


def rmdir_quietly(path: Path) -> None:
    # rmdir leaves non-empty directories alone
    try:
        path.rmdir()
    except OSError as exc:
        logger.debug("Failed to remove directory %s, ignoring: %s", path, exc)


__all__ = [
    "DIRECTORY_MODE",
    "FILE_MODE",
    "copy_file",
    "labelled_creation",
    "mkdir_parents",
    "open_text",
    "random_temp_path",
    "read_text",
    "remove_quietly",
    "rmdir_quietly",
    "touch",
    "write_text",
]

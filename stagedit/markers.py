"""Extraction of the editable region from edited staging files."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from .errors import TrimError
from .fs import read_text, write_text

logger = logging.getLogger(__name__)

WHITESPACE = " \t\n\r"


class TrimResult(Enum):
    """Outcome of trimming one staging file."""

    EMPTY = "empty"
    UNCHANGED = "unchanged"
    CHANGED = "changed"

    @property
    def meaningful(self) -> bool:
        return self is not TrimResult.EMPTY


def _content_region(
    text: str, marker_start: str | None, marker_end: str | None
) -> str:
    if (marker_start is None) != (marker_end is None):
        raise ValueError("Markers must be given together")

    content = text
    if marker_start is not None and marker_end is not None:
        start = content.find(marker_start)
        if start >= 0:
            content = content[start + len(marker_start) :]
        end = content.find(marker_end)
        if end >= 0:
            content = content[:end]
    return content


def extract_content(
    text: str, marker_start: str | None = None, marker_end: str | None = None
) -> str:
    """Return the stripped text between the first start and end markers.

    A missing start marker keeps the whole text; a missing end marker keeps
    everything after the start marker.
    """

    return _content_region(text, marker_start, marker_end).strip(WHITESPACE)


def line_ending(region: str) -> str:
    """Return the newline that closed the last line of ``region``."""

    tail = region[len(region.rstrip(WHITESPACE)) :]
    newline = tail.find("\n")
    return "\r\n" if newline > 0 and tail[newline - 1] == "\r" else "\n"


def trim_staging_file(
    path: Path, marker_start: str | None = None, marker_end: str | None = None
) -> TrimResult:
    """Rewrite ``path`` to hold only its meaningful content.

    Returns ``TrimResult.EMPTY`` (leaving the file untouched) when nothing
    survives, including when the editor never created the file.
    """

    try:
        old_contents = read_text(path)
    except FileNotFoundError:
        logger.debug("Staging file %s was not created by the editor", path)
        return TrimResult.EMPTY
    except OSError as exc:
        raise TrimError(f'Failed to read temporary file "{path}": {exc}', path) from exc

    region = _content_region(old_contents, marker_start, marker_end)
    content = region.strip(WHITESPACE)
    if not content:
        logger.debug("No content left in %s", path)
        return TrimResult.EMPTY

    new_contents = content + line_ending(region)
    if new_contents == old_contents:
        return TrimResult.UNCHANGED

    try:
        write_text(path, new_contents)
    except OSError as exc:
        raise TrimError(
            f'Failed to modify temporary file "{path}": {exc}', path
        ) from exc
    return TrimResult.CHANGED


__all__ = [
    "TrimResult",
    "WHITESPACE",
    "extract_content",
    "line_ending",
    "trim_staging_file",
]

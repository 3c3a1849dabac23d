"""Creation of the transient staging files handed to the editor."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from .errors import StagingError
from .fs import (
    FILE_MODE,
    copy_file,
    labelled_creation,
    mkdir_parents,
    open_text,
    random_temp_path,
    read_text,
    touch,
)

if TYPE_CHECKING:  # pragma: no cover - type check only
    from .session import EditRequest

logger = logging.getLogger(__name__)

# Header, start marker and a blank line precede the editable contents.
CONTENT_START_LINE = 4


def render_marked_content(
    target_path: Path,
    current: str | None,
    references: Iterable[tuple[Path, str]],
    marker_start: str,
    marker_end: str,
) -> str:
    """Lay out a staging file carrying markers and commented references."""

    body = current or ""
    parts = [
        f"### Editing {target_path}\n",
        f"{marker_start}\n",
        "\n",
        body,
        "" if body.endswith("\n") else "\n",
        "\n",
        f"{marker_end}\n",
    ]
    for path, contents in references:
        parts.append(f"\n\n### {path}")
        stripped = contents.strip(" \t\r\n")
        if stripped:
            parts.append("\n# " + stripped.replace("\n", "\n# "))
    return "".join(parts)


def stage_request(
    request: "EditRequest",
    plugins: pluggy.PluginManager,
    marker_start: str | None = None,
    marker_end: str | None = None,
) -> None:
    """Assign and create the staging file for ``request``.

    Sets ``request.staging_path`` as soon as a name is chosen so teardown can
    clean up after a failure in any later step.
    """

    target = request.target_path
    if request.reference_paths is not None and (
        marker_start is None or marker_end is None
    ):
        raise ValueError("Reference paths require both markers to be configured")

    staging = random_temp_path(target)
    request.staging_path = staging
    request.cursor_line = 1
    logger.debug("Staging %s as %s", target, staging)

    try:
        mkdir_parents(target, plugins)
    except OSError as exc:
        raise StagingError(
            f'Failed to create parent directories for "{target}": {exc}', target
        ) from exc

    if request.original_path is not None:
        _seed_from_original(request.original_path, staging, target, plugins)

    if request.reference_paths is not None:
        assert marker_start is not None and marker_end is not None
        contents = render_marked_content(
            target,
            _read_target(target),
            _read_references(target, request.reference_paths),
            marker_start,
            marker_end,
        )
        try:
            with labelled_creation(target, plugins):
                handle = open_text(staging, "w")
            with handle:
                os.fchmod(handle.fileno(), FILE_MODE)
                handle.write(contents)
        except OSError as exc:
            raise StagingError(
                f'Failed to create temporary file "{staging}": {exc}', target
            ) from exc
        request.cursor_line = CONTENT_START_LINE


def stage_requests(
    requests: Iterable["EditRequest"],
    plugins: pluggy.PluginManager,
    marker_start: str | None = None,
    marker_end: str | None = None,
) -> None:
    """Stage every request that does not have a staging file yet."""

    for request in requests:
        if request.staging_path is None:
            stage_request(request, plugins, marker_start, marker_end)


def _seed_from_original(
    original: Path, staging: Path, target: Path, plugins: pluggy.PluginManager
) -> None:
    try:
        with labelled_creation(target, plugins):
            try:
                copy_file(original, staging)
            except FileNotFoundError:
                if original.exists():
                    raise
                logger.debug("Original %s does not exist, staging empty file", original)
                touch(staging)
    except OSError as exc:
        raise StagingError(
            f'Failed to create temporary file "{staging}": {exc}', target
        ) from exc


def _read_target(target: Path) -> str | None:
    try:
        return read_text(target)
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StagingError(
            f'Failed to read target file "{target}": {exc}', target
        ) from exc


def _read_references(
    target: Path, reference_paths: Iterable[Path]
) -> list[tuple[Path, str]]:
    references: list[tuple[Path, str]] = []
    for path in reference_paths:
        # The target is already shown between the markers.
        if os.path.normpath(path) == os.path.normpath(target):
            continue
        try:
            references.append((path, read_text(path)))
        except OSError as exc:
            raise StagingError(
                f'Failed to read original file "{path}": {exc}', target
            ) from exc
    return references


__all__ = [
    "CONTENT_START_LINE",
    "render_marked_content",
    "stage_request",
    "stage_requests",
]

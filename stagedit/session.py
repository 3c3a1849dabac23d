"""Edit sessions: a batch of files opened together in one editor run."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import TracebackType

import pluggy

from .config import DEFAULT_EDITOR_VARIABLE, DEFAULT_FALLBACK_EDITORS, StageditConfig
from .editor import run_editor
from .errors import EmptySessionError, StageditError
from .fs import remove_quietly, rmdir_quietly
from .installer import install_request
from .markers import trim_staging_file
from .plugins import get_plugin_manager
from .staging import stage_requests

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EditRequest:
    """One file to edit, plus the transient state of its staging copy."""

    target_path: Path
    original_path: Path | None = None
    reference_paths: tuple[Path, ...] | None = None
    staging_path: Path | None = None
    cursor_line: int = 1


class InstallStatus(Enum):
    INSTALLED = "installed"
    NOT_MODIFIED = "not-modified"
    SKIPPED = "skipped"


@dataclass(slots=True, frozen=True)
class EditOutcome:
    """Per-file result of a session run."""

    path: Path
    status: InstallStatus


class EditSession:
    """Ordered set of edit requests driven through stage, edit, trim and install.

    Callers must tear the session down once, whatever happened; using the
    session as a context manager does that automatically::

        with EditSession(remove_empty_parent=True) as session:
            session.add("/etc/app/app.conf", original_path="/usr/lib/app.conf")
            session.run()
    """

    def __init__(
        self,
        marker_start: str | None = None,
        marker_end: str | None = None,
        *,
        remove_empty_parent: bool = False,
        editor_variable: str = DEFAULT_EDITOR_VARIABLE,
        fallback_editors: Sequence[str] = DEFAULT_FALLBACK_EDITORS,
        skip_install_on_editor_failure: bool = False,
        plugins: pluggy.PluginManager | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        if (marker_start is None) != (marker_end is None):
            raise ValueError("marker_start and marker_end must be given together")
        self.marker_start = marker_start
        self.marker_end = marker_end
        self.remove_empty_parent = remove_empty_parent
        self.editor_variable = editor_variable
        self.fallback_editors = tuple(fallback_editors)
        self.skip_install_on_editor_failure = skip_install_on_editor_failure
        self.editor_returncode: int | None = None
        self._plugins = plugins
        self._environ = environ
        self._requests: list[EditRequest] = []
        self._torn_down = False

    @classmethod
    def from_config(
        cls,
        config: StageditConfig,
        *,
        markers: bool = True,
        remove_empty_parent: bool | None = None,
        plugins: pluggy.PluginManager | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "EditSession":
        """Build a session using the settings of ``config``.

        ``remove_empty_parent`` overrides the configured value when given.
        """

        if remove_empty_parent is None:
            remove_empty_parent = config.remove_empty_parent
        return cls(
            config.marker_start if markers else None,
            config.marker_end if markers else None,
            remove_empty_parent=remove_empty_parent,
            editor_variable=config.editor_variable,
            fallback_editors=config.fallback_editors,
            skip_install_on_editor_failure=config.skip_install_on_editor_failure,
            plugins=plugins,
            environ=environ,
        )

    @property
    def plugins(self) -> pluggy.PluginManager:
        if self._plugins is None:
            self._plugins = get_plugin_manager()
        return self._plugins

    @property
    def requests(self) -> tuple[EditRequest, ...]:
        return tuple(self._requests)

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self) -> Iterator[EditRequest]:
        return iter(self._requests)

    def __enter__(self) -> "EditSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.teardown()

    def contains(self, target_path: Path | str) -> bool:
        key = _absolute(target_path)
        return any(request.target_path == key for request in self._requests)

    def add(
        self,
        target_path: Path | str,
        original_path: Path | str | None = None,
        reference_paths: Iterable[Path | str] | None = None,
    ) -> bool:
        """Register a file to edit.

        Returns ``False`` without touching the session when ``target_path`` is
        already registered, ``True`` otherwise.
        """

        if reference_paths is not None and self.marker_start is None:
            raise ValueError("Reference paths require markers to be configured")

        target = _absolute(target_path)
        if self.contains(target):
            return False

        references: tuple[Path, ...] | None = None
        if reference_paths is not None:
            # Ordered set semantics: keep the first occurrence of each path.
            references = tuple(dict.fromkeys(_absolute(p) for p in reference_paths))

        self._requests.append(
            EditRequest(
                target_path=target,
                original_path=_absolute(original_path) if original_path else None,
                reference_paths=references,
            )
        )
        return True

    def stage(self) -> None:
        """Create staging files for every request lacking one."""

        stage_requests(self._requests, self.plugins, self.marker_start, self.marker_end)

    def edit(self) -> int:
        """Open all staging files in a single editor run and wait for it."""

        if not self._requests:
            raise EmptySessionError()
        if any(request.staging_path is None for request in self._requests):
            self.stage()

        staging_paths = [
            request.staging_path
            for request in self._requests
            if request.staging_path is not None
        ]
        cursor_line = self._requests[0].cursor_line if len(self._requests) == 1 else 1
        self.editor_returncode = run_editor(
            staging_paths,
            cursor_line,
            editor_variable=self.editor_variable,
            fallback_editors=self.fallback_editors,
            environ=self._environ,
        )
        return self.editor_returncode

    def install(self) -> list[EditOutcome]:
        """Trim and install every staged file, stopping at the first failure.

        The outcomes of files handled before a failure are attached to the
        raised error as ``completed``.
        """

        outcomes: list[EditOutcome] = []
        for request in self._requests:
            if request.staging_path is None:
                continue
            try:
                result = trim_staging_file(
                    request.staging_path, self.marker_start, self.marker_end
                )
                if not result.meaningful:
                    outcomes.append(
                        EditOutcome(request.target_path, InstallStatus.NOT_MODIFIED)
                    )
                    continue
                install_request(request)
            except StageditError as exc:
                exc.completed = tuple(outcomes)
                raise
            outcomes.append(EditOutcome(request.target_path, InstallStatus.INSTALLED))
        return outcomes

    def run(self) -> list[EditOutcome]:
        """Stage, edit, trim and install all registered files.

        Raises
        ------
        EmptySessionError
            If no file was added.
        StageditError
            For staging, editor, trimming or installation failures. Files
            installed before the failure stay installed and are listed in the
            error's ``completed`` outcomes.
        """

        if not self._requests:
            raise EmptySessionError()

        self.stage()
        returncode = self.edit()
        if returncode != 0 and self.skip_install_on_editor_failure:
            logger.warning(
                "Editor exited with status %d, discarding edits", returncode
            )
            return [
                EditOutcome(request.target_path, InstallStatus.SKIPPED)
                for request in self._requests
            ]
        return self.install()

    def teardown(self) -> None:
        """Remove leftover staging files and, if asked, empty parent directories.

        Safe to call more than once; never raises for filesystem failures.
        """

        if self._torn_down:
            return
        self._torn_down = True

        for request in self._requests:
            if request.staging_path is not None:
                remove_quietly(request.staging_path)
                request.staging_path = None
            if self.remove_empty_parent:
                rmdir_quietly(request.target_path.parent)
        self._requests.clear()


def _absolute(path: Path | str) -> Path:
    return Path(os.path.abspath(os.fspath(path)))


__all__ = ["EditOutcome", "EditRequest", "EditSession", "InstallStatus"]

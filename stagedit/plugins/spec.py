"""Hook specifications for stagedit plugins."""

from __future__ import annotations

from pathlib import Path

from ._markers import hookspec


class StageditHookSpec:
    """Collection of pluggy hook specifications."""

    @hookspec
    def stagedit_create_file_prepare(self, path: Path) -> None:
        """Prepare the security context for a file about to be created for ``path``.

        ``path`` is the final target; the file actually created is its staging
        sibling, which ends up renamed over ``path``.
        """

    @hookspec
    def stagedit_create_file_clear(self, path: Path) -> None:
        """Undo whatever ``stagedit_create_file_prepare`` set up for ``path``."""

    @hookspec(firstresult=True)
    def stagedit_mkdir_parents(self, path: Path, mode: int) -> bool | None:
        """Make sure every ancestor directory of ``path`` exists.

        Return ``True`` once handled so later implementations are skipped.
        """

"""Built-in plugin creating parent directories with plain ``mkdir``."""

from __future__ import annotations

from pathlib import Path

from .._markers import hookimpl


@hookimpl(trylast=True)
def stagedit_mkdir_parents(path: Path, mode: int) -> bool:
    path.parent.mkdir(mode=mode, parents=True, exist_ok=True)
    return True

"""Built-in stagedit plugins."""

from __future__ import annotations

from . import fs

BUILTIN_PLUGINS = (fs,)

__all__ = ["BUILTIN_PLUGINS"]

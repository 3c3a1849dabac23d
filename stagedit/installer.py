"""Atomic installation of edited staging files over their targets."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from .errors import InstallError

if TYPE_CHECKING:  # pragma: no cover - type check only
    from .session import EditRequest

logger = logging.getLogger(__name__)


def install_request(request: "EditRequest") -> None:
    """Rename the staging file over the target and forget the staging path."""

    staging = request.staging_path
    if staging is None:
        raise ValueError(f"No staging file to install for {request.target_path}")

    try:
        os.replace(staging, request.target_path)
    except OSError as exc:
        raise InstallError(staging, request.target_path, str(exc)) from exc

    request.staging_path = None
    logger.info("Successfully installed edited file '%s'.", request.target_path)


__all__ = ["install_request"]

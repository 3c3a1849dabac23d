"""Shared helpers for stagedit CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import click

from ..config import ConfigError, StageditConfig, load_config
from ..session import EditOutcome, InstallStatus

CONTEXT_SETTINGS: dict[str, Any] = {"help_option_names": ["-h", "--help"]}


class StageditCliError(click.ClickException):
    """Shared Click exception wrapper for CLI failures."""


def get_config(ctx: click.Context) -> StageditConfig:
    """Return a cached configuration for the current CLI invocation."""

    config: StageditConfig | None = ctx.obj.get("config")
    if config is not None:
        return config

    config_path_opt: Path | None = ctx.obj.get("config_path")
    try:
        config = load_config(config_path_opt)
    except ConfigError as exc:
        raise StageditCliError(str(exc)) from exc

    ctx.obj["config"] = config
    return config


def echo_outcomes(outcomes: Iterable[EditOutcome]) -> None:
    for outcome in outcomes:
        if outcome.status is InstallStatus.INSTALLED:
            click.echo(f"Installed {outcome.path}")
        elif outcome.status is InstallStatus.SKIPPED:
            click.echo(f"Discarded edits for {outcome.path}")
        else:
            click.echo(f"No changes for {outcome.path}")

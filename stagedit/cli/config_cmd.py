"""Config command for the stagedit CLI."""

from __future__ import annotations

from pathlib import Path

import click

from ..config import DEFAULT_CONFIG_PATH, StageditConfig, bootstrap_config_file
from ..errors import StageditError
from ..session import EditSession, InstallStatus
from ._common import StageditCliError


@click.command(name="config")
@click.pass_context
def config(ctx: click.Context) -> None:
    """Open the stagedit configuration file in the editor."""

    selected_path: Path | None = ctx.obj.get("config_path")
    config_path = (selected_path or DEFAULT_CONFIG_PATH).expanduser().absolute()

    created = bootstrap_config_file(config_path)
    if created:
        click.echo(f"Created configuration at {config_path}")

    # The file being edited may be broken, so only the defaults are trusted.
    with EditSession.from_config(StageditConfig(), markers=False) as session:
        session.add(config_path, original_path=config_path)
        try:
            outcomes = session.run()
        except StageditError as exc:
            raise StageditCliError(f"Failed to edit configuration: {exc}") from exc

    if outcomes and outcomes[0].status is InstallStatus.INSTALLED:
        click.echo(f"Updated configuration at {config_path}")
    else:
        click.echo(f"Configuration at {config_path} left unchanged")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(config)

"""stagedit CLI package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import click

from . import config_cmd, edit
from ._common import CONTEXT_SETTINGS, StageditCliError

__all__ = ["cli", "main", "StageditCliError"]

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-c",
    "--config",
    "config_path_opt",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to configuration TOML file.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase log output (repeat for debug messages).",
)
@click.pass_context
def cli(ctx: click.Context, config_path_opt: Path | None, verbose: int) -> None:
    """stagedit command group."""

    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.command.get_help(ctx))
        ctx.exit(0)

    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s: %(message)s",
    )
    ctx.obj["config_path"] = config_path_opt


for register_command in (
    edit.register,
    config_cmd.register,
):
    register_command(cli)


def main(argv: Sequence[str] | None = None) -> int:
    args = list(argv) if argv is not None else None
    try:
        return cli.main(args=args, prog_name="stagedit", standalone_mode=False)
    except click.ClickException as exc:
        click.echo(str(exc), err=True)
        return 1
    except SystemExit as exc:
        return int(exc.code)

"""Edit command for the stagedit CLI."""

from __future__ import annotations

from pathlib import Path

import click

from ..errors import StageditError
from ..session import EditSession
from ._common import StageditCliError, echo_outcomes, get_config


@click.command(name="edit")
@click.argument(
    "targets",
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-f",
    "--from",
    "original",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Seed the file from ORIGINAL when the target does not exist yet.",
)
@click.option(
    "-r",
    "--reference",
    "references",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Show this file as commented context (implies --markers).",
)
@click.option(
    "--markers",
    is_flag=True,
    help="Wrap the editable contents in start/end markers.",
)
@click.option(
    "--remove-empty-parent",
    is_flag=True,
    help="Remove the parent directory afterwards if it ends up empty.",
)
@click.pass_context
def edit(
    ctx: click.Context,
    targets: tuple[Path, ...],
    original: Path | None,
    references: tuple[Path, ...],
    markers: bool,
    remove_empty_parent: bool,
) -> None:
    """Edit TARGET files in the configured editor."""

    config = get_config(ctx)

    if original is not None and len(targets) != 1:
        raise StageditCliError("--from can only be used with a single target.")

    session = EditSession.from_config(
        config,
        markers=markers or bool(references),
        remove_empty_parent=remove_empty_parent or None,
    )
    with session:
        for target in targets:
            session.add(
                target,
                original_path=original,
                reference_paths=references or None,
            )
        try:
            outcomes = session.run()
        except StageditError as exc:
            echo_outcomes(exc.completed)
            raise StageditCliError(str(exc)) from exc

    echo_outcomes(outcomes)


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(edit)

from __future__ import annotations

import shlex
from pathlib import Path

import click
import more_itertools

from .commands import PipeError, pipe, relative_symlink, rustup_add
from .common import logger
from .paths import relativize_path
from .process import Command, CommandError


@click.group(context_settings={'max_content_width': 120, 'show_default': True})
def main() -> None:
    pass


@main.command(name='relpath', short_help='print path to SRC, relative to directory DEST')
@click.argument('src', type=Path)
@click.argument('dest', type=Path)
def relpath(*, src: Path, dest: Path) -> None:
    if not (src.is_absolute() and dest.is_absolute()):
        raise click.BadParameter('both paths should be absolute')
    click.echo(relativize_path(src, dest))


@main.command(name='link', short_help='symlink SRC into directory DEST, via relative path')
@click.argument('src', type=Path)
@click.argument('dest', type=Path)
def link(*, src: Path, dest: Path) -> None:
    try:
        relative_symlink(src.absolute(), dest.absolute())
    except CommandError as e:
        raise click.ClickException(f'ln: {e}') from e


@main.command(name='add-target', short_help='install toolchain targets (via rustup)')
@click.argument('triples', type=str, nargs=-1, required=True)
def add_target(*, triples: tuple[str, ...]) -> None:
    for triple in more_itertools.unique_everseen(triples):
        logger.info('adding target %s', triple)
        try:
            rustup_add(triple)
        except CommandError as e:
            raise click.ClickException(f'rustup target add {triple}: {e}') from e
        click.secho(f'added {triple}', fg='green')


def _parse_command(_ctx: click.Context, _param: click.Parameter, value: str) -> Command:
    parts = shlex.split(value)
    if len(parts) == 0:
        raise click.BadParameter('empty command')
    return Command.of(*parts)


@main.command(name='pipe', short_help="feed stdout of FIRST into stdin of SECOND")
@click.option('--first', type=str, required=True, callback=_parse_command, help='Command to run to completion, e.g. "git diff"')
@click.option('--second', type=str, required=True, callback=_parse_command, help='Command receiving the output, e.g. "less"')
def pipe_(*, first: Command, second: Command) -> None:
    try:
        pipe(first, second)
    except PipeError as e:
        raise click.ClickException(str(e)) from e

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from .common import PathIsh, logger
from .paths import relativize_path
from .process import Command, CommandError, ExitStatus, into_result, output, run, spawn


def force_symlink(src: PathIsh, dest: PathIsh) -> None:
    # -f: always recreate the symlink
    # -n: if dest is a symlink to a directory, replace it instead of creating the link inside
    run(Command.of('ln', '-sfn', src, dest))


def relative_symlink(abs_src: PathIsh, abs_dest: PathIsh) -> None:
    """
    Symlink abs_src into the directory abs_dest, with a target relative to abs_dest

    So the link keeps working if the whole tree containing both is moved somewhere else
    """
    rel_src = relativize_path(abs_src, abs_dest)
    # explicit link path, so a symlinked abs_dest is entered rather than replaced by -n
    force_symlink(rel_src, Path(abs_dest) / Path(abs_src).name)


def git(dir: PathIsh, args: Sequence[str]) -> None:  # noqa: A002
    run(Command.of('git', '-C', dir, *args))


def rustup_add(triple: str) -> None:
    run(Command.of('rustup', 'target', 'add', triple))


install_toolchain_target = rustup_add


class PipeError(Exception):
    stage = 'pipe failed'

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f'{self.stage}: {cause}')


class FirstStageFailed(PipeError):
    cause: CommandError
    stage = 'first command failed'


class SecondStageFailed(PipeError):
    cause: CommandError
    stage = 'second command failed'


class TransferFailed(PipeError):
    cause: OSError
    stage = 'writing to the second command failed'


def pipe(first: Command, second: Command) -> None:
    """
    Runs first to completion, then feeds everything it printed to stdout into second's stdin

    Unlike a shell pipe, nothing is streamed: first's output is buffered in memory
    """
    try:
        tx_output = into_result(output(first))
    except CommandError as e:
        raise FirstStageFailed(e) from e

    try:
        rx = into_result(spawn(second, stdin=subprocess.PIPE))
    except CommandError as e:
        raise SecondStageFailed(e) from e

    logger.debug('piping %d bytes: %s | %s', len(tx_output.stdout), first, second)
    try:
        # closing stdin is what signals EOF to the second command
        with rx.stdin as stdin:
            stdin.write(tx_output.stdout)
    except OSError as e:
        # e.g. BrokenPipeError if second exited without reading everything
        raise TransferFailed(e) from e
    finally:
        returncode = rx.wait()

    try:
        into_result(ExitStatus(returncode))
    except CommandError as e:
        raise SecondStageFailed(e) from e

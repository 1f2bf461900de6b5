"""
Running external commands, and collapsing all the different ways they can go wrong into CommandError

Runners (status/output/spawn) don't raise on failure, they return the raw outcome:
either what the process produced, or the OSError if it couldn't even start.
into_result then turns any of these outcomes into either a value or one of:

- UnableToSpawn      : process never started (binary not found, permission denied, etc.)
- NonZeroExitStatus  : process exited unsuccessfully. code is None if it was killed by a signal
"""

from __future__ import annotations

import dataclasses
import shlex
import subprocess
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, TypeAlias

from plumbum import CommandNotFound, local  # type: ignore[import-untyped]
from plumbum.machines.local import PlumbumLocalPopen  # type: ignore[import-untyped]

from .common import PathIsh, logger


@dataclass(frozen=True)
class ExitStatus:
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def code(self) -> int | None:
        # subprocess reports death by signal N as returncode -N
        return None if self.returncode < 0 else self.returncode

    @property
    def signal(self) -> int | None:
        return -self.returncode if self.returncode < 0 else None


@dataclass(frozen=True)
class Output:
    status: ExitStatus
    stdout: bytes
    stderr: bytes


SpawnFailure: TypeAlias = OSError | CommandNotFound
Popen: TypeAlias = subprocess.Popen | PlumbumLocalPopen
CommandOutcome: TypeAlias = ExitStatus | Output | Popen | SpawnFailure


class CommandError(Exception):
    pass


class UnableToSpawn(CommandError):
    def __init__(self, error: SpawnFailure) -> None:
        self.error = error
        super().__init__(f'unable to spawn: {error}')


class NonZeroExitStatus(CommandError):
    def __init__(self, code: int | None, *, signal: int | None = None) -> None:
        self.code = code
        self.signal = signal
        if code is not None:
            msg = f'exited with status {code}'
        elif signal is not None:
            msg = f'killed by signal {signal}'
        else:
            msg = 'killed by a signal'
        super().__init__(msg)


class Unsuccessful(Exception):  # noqa: N818
    """
    Payload-free failure, what into_result gives for False
    """


@singledispatch
def into_result(outcome: Any) -> Any:
    raise TypeError(f"don't know how to interpret {type(outcome)} as a command result")


@into_result.register
def _bool_result(ok: bool) -> None:  # noqa: FBT001
    if not ok:
        raise Unsuccessful


@into_result.register
def _status_result(status: ExitStatus) -> None:
    try:
        into_result(status.success)
    except Unsuccessful:
        raise NonZeroExitStatus(status.code, signal=status.signal) from None


@into_result.register
def _output_result(output: Output) -> Output:
    into_result(output.status)
    return output


@into_result.register(subprocess.Popen)
@into_result.register(PlumbumLocalPopen)
def _spawned_result(proc: Popen) -> Popen:
    # still running, nothing to check yet
    return proc


@into_result.register(OSError)
@into_result.register(CommandNotFound)
def _spawn_failure_result(error: SpawnFailure) -> Any:
    raise UnableToSpawn(error) from error


@dataclass(frozen=True)
class Command:
    """
    Description of an external command, only resolved (via plumbum) when it's actually run
    """

    program: PathIsh
    argv: tuple[str, ...] = ()
    environ: tuple[tuple[str, str], ...] = ()

    @classmethod
    def of(cls, program: PathIsh, *args: PathIsh) -> Command:
        return cls(program=program).args(*args)

    def arg(self, arg: PathIsh) -> Command:
        return self.args(arg)

    def args(self, *args: PathIsh) -> Command:
        return dataclasses.replace(self, argv=(*self.argv, *map(str, args)))

    def env(self, **kwargs: str) -> Command:
        return dataclasses.replace(self, environ=(*self.environ, *kwargs.items()))

    def popen(self, **kwargs: Any) -> PlumbumLocalPopen:
        """
        Raises CommandNotFound if the program isn't on PATH, or OSError if it couldn't be started
        """
        cmd = local[str(self.program)][self.argv]
        if len(self.environ) > 0:
            # on top of plumbum's environment (which might differ from os.environ, e.g. under local.env(...))
            kwargs['env'] = {**local.env.getdict(), **dict(self.environ)}
        return cmd.popen(**kwargs)

    def __str__(self) -> str:
        return shlex.join([str(self.program), *self.argv])


def status(cmd: Command) -> ExitStatus | SpawnFailure:
    """
    Run with inherited stdin/stdout/stderr and wait for it to finish
    """
    logger.debug('running: %s', cmd)
    try:
        proc = cmd.popen(stdin=None, stdout=None, stderr=None)
    except (OSError, CommandNotFound) as e:
        return e
    with proc:
        return ExitStatus(proc.wait())


def output(cmd: Command) -> Output | SpawnFailure:
    """
    Run to completion, capturing stdout and stderr
    """
    logger.debug('running (capturing output): %s', cmd)
    try:
        proc = cmd.popen(stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except (OSError, CommandNotFound) as e:
        return e
    with proc:
        stdout, stderr = proc.communicate()
    return Output(status=ExitStatus(proc.returncode), stdout=stdout, stderr=stderr)


def spawn(cmd: Command, **kwargs: Any) -> Popen | SpawnFailure:
    """
    Start the process without waiting for it. kwargs are passed to Popen (e.g. stdin=subprocess.PIPE)

    By default the process inherits stdin/stdout/stderr
    """
    logger.debug('spawning: %s', cmd)
    kwargs = {'stdin': None, 'stdout': None, 'stderr': None, **kwargs}
    try:
        return cmd.popen(**kwargs)
    except (OSError, CommandNotFound) as e:
        return e


def _checked(cmd: Command, outcome: Any) -> Any:
    try:
        return into_result(outcome)
    except CommandError as e:
        logger.warning('%s: %s', cmd, e)
        e.add_note(f'command: {cmd}')
        raise


def run(cmd: Command) -> None:
    _checked(cmd, status(cmd))


def check_output(cmd: Command) -> Output:
    return _checked(cmd, output(cmd))

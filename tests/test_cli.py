import os
from pathlib import Path

from click.testing import CliRunner

from toolshed.core.cli import main


def test_relpath() -> None:
    res = CliRunner().invoke(main, ['relpath', '/a/b/c', '/a/x/y'])
    assert res.exit_code == 0, res.output
    assert res.stdout.strip() == '../../b/c'


def test_relpath_not_absolute() -> None:
    res = CliRunner().invoke(main, ['relpath', 'a/b', '/a'])
    assert res.exit_code == 2
    assert 'absolute' in res.output


def test_link(tmp_path: Path) -> None:
    src = tmp_path / 'lib' / 'data.txt'
    src.parent.mkdir()
    src.write_text('data')
    dest = tmp_path / 'out'
    dest.mkdir()

    res = CliRunner().invoke(main, ['link', str(src), str(dest)])
    assert res.exit_code == 0, res.output
    assert os.readlink(dest / 'data.txt') == '../lib/data.txt'


def test_pipe(tmp_path: Path) -> None:
    out = tmp_path / 'out'
    res = CliRunner().invoke(main, ['pipe', '--first', 'printf abc', '--second', f"sh -c 'cat > {out}'"])
    assert res.exit_code == 0, res.output
    assert out.read_text() == 'abc'


def test_pipe_failure() -> None:
    res = CliRunner().invoke(main, ['pipe', '--first', 'false', '--second', 'cat'])
    assert res.exit_code == 1
    assert 'first command failed' in res.output


def test_pipe_empty_command() -> None:
    res = CliRunner().invoke(main, ['pipe', '--first', '  ', '--second', 'cat'])
    assert res.exit_code == 2


def test_add_target(tmp_path: Path) -> None:
    from plumbum import local  # type: ignore[import-untyped]

    from toolshed.core.paths import add_to_path

    bindir = tmp_path / 'bin'
    bindir.mkdir()
    log = tmp_path / 'rustup.log'
    rustup = bindir / 'rustup'
    rustup.write_text(f'#!/bin/sh\necho "$@" >> {log}\n[ "$3" = "bad" ] && exit 1\nexit 0\n')
    rustup.chmod(0o755)

    with local.env(PATH=add_to_path(bindir, local.env.get('PATH', ''))):
        res = CliRunner().invoke(main, ['add-target', 'aarch64-linux-android', 'aarch64-linux-android', 'bad', 'never'])
    assert res.exit_code == 1
    assert 'rustup target add bad' in res.output
    # duplicates are only installed once, and it stops at the first failure
    assert log.read_text().splitlines() == ['target add aarch64-linux-android', 'target add bad']

from __future__ import annotations

import os
from pathlib import Path

from .common import PathIsh, logger


def common_root(abs_src: Path, abs_dest: Path) -> Path:
    # strip abs_dest until it's a prefix of abs_src
    # the last parent is the filesystem root, so for absolute paths this always terminates with a match
    for root in (abs_dest, *abs_dest.parents):
        if abs_src.is_relative_to(root):
            return root
    raise AssertionError(f"{abs_src} and {abs_dest} have no common root")


def relativize_path(abs_path: PathIsh, abs_relative_to: PathIsh) -> Path:
    '''
    Relative path which resolves to abs_path when followed from the directory abs_relative_to

    >>> relativize_path('/a/b/c', '/a/x/y')
    PosixPath('../../b/c')

    No filesystem access, so neither of the paths has to exist
    '''
    abs_path = Path(abs_path)
    abs_relative_to = Path(abs_relative_to)
    assert abs_path.is_absolute(), abs_path
    assert abs_relative_to.is_absolute(), abs_relative_to

    root = common_root(abs_path, abs_relative_to)
    path = abs_path.relative_to(root)
    relative_to = abs_relative_to.relative_to(root)

    # walk up to the common root, then descend into the source
    ups = [os.pardir] * len(relative_to.parts)
    rel_path = Path(*ups, *path.parts)
    logger.info('translated %s to %s', abs_path, rel_path)
    return rel_path


def add_to_path(path: PathIsh, search_path: str) -> str:
    """
    Prepends path to a PATH-like search_path, e.g. add_to_path(bindir, os.environ['PATH'])
    """
    if search_path == '':
        # empty entry would mean current directory
        return str(path)
    return f'{path}:{search_path}'

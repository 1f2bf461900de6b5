from __future__ import annotations

import logging
import os
from typing import TypeAlias, cast

import logzero  # type: ignore[import-untyped]

Level: TypeAlias = int
LevelIsh: TypeAlias = Level | str | None


def mklevel(level: LevelIsh) -> Level:
    if level is None:
        return logging.NOTSET
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper())


FORMAT = '{start}[%(levelname)-7s %(asctime)s %(name)s %(filename)s:%(lineno)d]{end} %(message)s'
FORMAT_COLOR = FORMAT.format(start='%(color)s', end='%(end_color)s')
DATEFMT = '%Y-%m-%d %H:%M:%S'


def _env_level(name: str) -> str | None:
    # e.g. LOGGING_LEVEL_toolshed_core_common=warning
    var = 'LOGGING_LEVEL_' + name.replace('.', '_')
    return os.environ.get(var)


def setup_logger(logger: logging.Logger, *, level: LevelIsh) -> None:
    lvl = mklevel(_env_level(logger.name) or level)
    formatter = logzero.LogFormatter(fmt=FORMAT_COLOR, datefmt=DATEFMT)
    # NOTE: logzero replaces the handlers of the logger with the same name
    logzero.setup_logger(logger.name, level=lvl, formatter=formatter)


_init_done = 'lazylogger_init_done'


class LazyLogger(logging.Logger):
    """
    Logger which only sets up handlers/formatting on the first actual logging call

    Otherwise merely importing a module would mess with user's logging config
    """

    def __new__(cls, name: str, level: LevelIsh = 'INFO') -> LazyLogger:  # noqa: PYI034
        logger = logging.getLogger(name)

        # this is called prior to all _log calls so makes sense to do it here
        def isEnabledFor_lazyinit(*args, logger=logger, orig=logger.isEnabledFor, **kwargs) -> bool:
            if not getattr(logger, _init_done, False):
                setup_logger(logger, level=level)
                setattr(logger, _init_done, True)
                logger.isEnabledFor = orig  # type: ignore[method-assign]
            return orig(*args, **kwargs)

        logger.isEnabledFor = isEnabledFor_lazyinit  # type: ignore[method-assign]
        return cast(LazyLogger, logger)

from __future__ import annotations

import re
from pathlib import Path
from typing import TypeAlias

from .ext.logging import LazyLogger

logger = LazyLogger(__name__, level='debug')


PathIsh: TypeAlias = Path | str


def read_str(path: PathIsh) -> str:
    return Path(path).read_text(encoding='utf8')


def has_match(regex: re.Pattern[str] | str, body: str, pattern: str) -> bool:
    """
    Whether the first match of regex in body has some group (including the whole match) equal to pattern
    """
    m = re.search(regex, body)
    if m is None:
        return False
    # groups which didn't participate in the match are None, so never equal
    return any(g == pattern for g in (m.group(0), *m.groups()))

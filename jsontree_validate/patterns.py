"""Regex handling for schema ``pattern`` keywords.

Schema authors may write ``(?i)`` anywhere in a pattern to request a
case-insensitive match. Python only accepts global inline flags at the very
start of an expression, so the marker is stripped and turned into
``re.IGNORECASE`` before compiling.
"""

from __future__ import annotations

import functools
import re
from typing import Tuple

INSENSITIVE_MARKER = "(?i)"


def rewrite_pattern(pattern: str, flags: int = 0) -> Tuple[str, int]:
    """Return ``(pattern, flags)`` with the first case-insensitivity marker moved into ``flags``."""
    if INSENSITIVE_MARKER not in pattern:
        return pattern, flags
    return pattern.replace(INSENSITIVE_MARKER, "", 1), flags | re.IGNORECASE


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str, flags: int = 0) -> re.Pattern:
    # re.error propagates; schema loading turns it into RegexCompileError
    rewritten, rewritten_flags = rewrite_pattern(pattern, flags)
    return re.compile(rewritten, rewritten_flags)

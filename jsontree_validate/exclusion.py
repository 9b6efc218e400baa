"""Decide whether a discovered file is skipped.

A file is skipped when the configured exclude regex matches its full path, or
when the externally supplied exclusion policy reports it as excluded. The
regex is tested first; a regex match never consults the policy.
"""

from __future__ import annotations

import enum
import re
from typing import Optional, Protocol

from .errors import ConfigError


class ExclusionPolicy(Protocol):
    def is_excluded(self, full_path: str) -> bool: ...


class NoExclusions:
    """Policy that excludes nothing."""

    def is_excluded(self, full_path: str) -> bool:
        return False


class ExcludedBy(enum.Enum):
    REGEX = "regex"
    POLICY = "policy"


class ExclusionGate:
    def __init__(self, exclude_regex: Optional[str] = None, policy: Optional[ExclusionPolicy] = None) -> None:
        self.policy = policy if policy is not None else NoExclusions()
        self.regex: Optional[re.Pattern] = None
        if exclude_regex:
            try:
                self.regex = re.compile(exclude_regex)
            except re.error as exc:
                raise ConfigError(f"invalid exclude regex {exclude_regex!r}: {exc}") from exc

    def check(self, full_path: str) -> Optional[ExcludedBy]:
        if self.regex is not None and self.regex.search(full_path):
            return ExcludedBy.REGEX
        if self.policy.is_excluded(full_path):
            return ExcludedBy.POLICY
        return None

    def is_excluded(self, full_path: str) -> bool:
        return self.check(full_path) is not None

"""Validate a tree of JSON (and YAML-as-JSON) files against a JSON Schema."""

from __future__ import annotations

from .config import Settings
from .errors import (
    ConfigError,
    ParseError,
    RegexCompileError,
    SchemaLoadError,
    ValidatorError,
)
from .exclusion import ExclusionGate, ExclusionPolicy, NoExclusions
from .validate import ErrorDetail, ValidationResult, Violation, json_validator

__all__ = [
    "ConfigError",
    "ErrorDetail",
    "ExclusionGate",
    "ExclusionPolicy",
    "NoExclusions",
    "ParseError",
    "RegexCompileError",
    "SchemaLoadError",
    "Settings",
    "ValidationResult",
    "ValidatorError",
    "Violation",
    "json_validator",
]

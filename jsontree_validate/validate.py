"""Validate every matching file under a base directory against a JSON Schema.

Each discovered file ends up exactly once as passed, failed or skipped:
  - skipped: the exclude regex or the exclusion policy matches its full path
  - failed: it cannot be parsed ("Invalid JSON"), or it violates the schema
  - passed: otherwise

Only schema setup errors abort the run; per-file failures are recorded in
the returned ValidationResult.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from jsonschema.exceptions import ValidationError

from . import schemas
from .config import Settings
from .discovery import build_glob, discover_files
from .documents import parse_document
from .errors import INVALID_JSON, ParseError
from .exclusion import ExclusionGate, ExclusionPolicy

logger = logging.getLogger(__name__)


class Verdict(enum.Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ErrorDetail:
    path: Optional[str]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True)
class Violation:
    file: str
    errors: Tuple[ErrorDetail, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.file, "errors": [e.to_dict() for e in self.errors]}


@dataclass(frozen=True)
class ValidationResult:
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    violations: Tuple[Violation, ...] = ()

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "violations": [v.to_dict() for v in self.violations],
        }


def _pointer(error: ValidationError) -> Optional[str]:
    """JSON Pointer to the failing value, or None for the document root."""
    if not error.absolute_path:
        return None
    parts = (str(p).replace("~", "~0").replace("/", "~1") for p in error.absolute_path)
    return "/" + "/".join(parts)


def _validate_one(validator, instance) -> List[ErrorDetail]:
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    return [ErrorDetail(path=_pointer(e), message=e.message) for e in errors]


def _check_file(full_path: str, gate: ExclusionGate, validator, settings: Settings, log) -> Tuple[Verdict, Optional[Violation]]:
    excluded_by = gate.check(full_path)
    if excluded_by is not None:
        log.info(f"skipping due to exclude match ({excluded_by.value}): {full_path}")
        return Verdict.SKIPPED, None

    try:
        instance = parse_document(full_path, settings.yaml_extensions)
    except ParseError:
        log.error(f"failed to parse JSON file: {full_path}")
        return Verdict.FAILED, Violation(file=full_path, errors=(ErrorDetail(path=None, message=INVALID_JSON),))

    errors = _validate_one(validator, instance)
    if errors:
        log.error(f"failed to validate JSON file: {full_path}\n{json.dumps([e.to_dict() for e in errors])}")
        return Verdict.FAILED, Violation(file=full_path, errors=tuple(errors))

    log.info(f"{full_path} is valid")
    return Verdict.PASSED, None


def json_validator(settings: Settings, exclude: Optional[ExclusionPolicy] = None, log=None) -> ValidationResult:
    """Run the whole validation.

    ``log`` is any object with ``info`` and ``error`` methods (defaults to this
    module's logger). Raises SchemaLoadError or ConfigError before any file is
    read when the schema or the exclude regex cannot be compiled.
    """
    log = log if log is not None else logger
    validator = schemas.build_validator(settings.schema_dir, settings.schema_id or None)
    gate = ExclusionGate(settings.json_exclude_regex, exclude)

    base = settings.base_dir_sanitized
    pattern = build_glob(
        settings.json_extension,
        settings.yaml_as_json,
        settings.yaml_extension,
        settings.yaml_extension_short,
    )
    files = discover_files(base, pattern)
    logger.debug("found %d files matching %s under %s", len(files), pattern, base)

    counts = {verdict: 0 for verdict in Verdict}
    violations: List[Violation] = []
    for rel in files:
        full_path = f"{base}/{rel}"
        verdict, violation = _check_file(full_path, gate, validator, settings, log)
        counts[verdict] += 1
        if violation is not None:
            violations.append(violation)

    return ValidationResult(
        passed=counts[Verdict.PASSED],
        failed=counts[Verdict.FAILED],
        skipped=counts[Verdict.SKIPPED],
        violations=tuple(violations),
    )

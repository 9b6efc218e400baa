#!/usr/bin/env python3
"""Validate a directory tree of JSON (and optionally YAML) files against a JSON Schema.

Defaults for every option come from the CI-runner style ``INPUT_*``
environment variables (see jsontree_validate.config).

Exit status:
  0 on success, 1 on any validation failure, 2 on a schema or settings error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import Settings
from .errors import ValidatorError
from .validate import ValidationResult, json_validator


def _print_report(result: ValidationResult) -> None:
    for v in result.violations:
        print(f"Validation failed: {v.file}")
        for e in v.errors:
            print(f"  - {e.path or '/'}: {e.message}")
    status = "OK" if result.success else "FAILED"
    print(f"Schema validation: {status} (passed={result.passed} failed={result.failed} skipped={result.skipped})")


def main(argv: Optional[List[str]] = None) -> int:
    try:
        defaults = Settings.from_env()
    except ValidatorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    ap = argparse.ArgumentParser(description="Validate JSON/YAML files against a JSON Schema.")
    ap.add_argument("--base-dir", default=defaults.base_dir, help="Directory to scan (default: %(default)s).")
    ap.add_argument("--schema-dir", default=defaults.schema_dir, help="Directory of schema documents (default: %(default)s).")
    ap.add_argument("--schema-id", default=defaults.schema_id, help="$id or relative path of the schema to validate against.")
    ap.add_argument("--json-extension", default=defaults.json_extension)
    ap.add_argument("--yaml-extension", default=defaults.yaml_extension)
    ap.add_argument("--yaml-extension-short", default=defaults.yaml_extension_short)
    ap.add_argument("--yaml-as-json", action="store_true", default=defaults.yaml_as_json, help="Also validate YAML files.")
    ap.add_argument("--exclude-regex", default=defaults.json_exclude_regex, help="Skip files whose full path matches.")
    ap.add_argument("--json", action="store_true", help="Print the result as JSON.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")

    settings = replace(
        defaults,
        base_dir=args.base_dir,
        schema_dir=args.schema_dir,
        schema_id=args.schema_id,
        json_extension=args.json_extension,
        yaml_extension=args.yaml_extension,
        yaml_extension_short=args.yaml_extension_short,
        yaml_as_json=args.yaml_as_json,
        json_exclude_regex=args.exclude_regex,
    )

    try:
        result = json_validator(settings)
    except ValidatorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_report(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())

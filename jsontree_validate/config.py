"""Run settings.

Settings can be read from CI-runner style ``INPUT_*`` environment variables
(``INPUT_BASE_DIR``, ``INPUT_SCHEMA_DIR``, ...). Missing or blank values fall
back to the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional, Tuple

from .errors import ConfigError


def parse_bool(value: str, name: str = "value") -> bool:
    v = value.strip().lower()
    if v == "true":
        return True
    if v == "false":
        return False
    raise ConfigError(f"{name} must be 'true' or 'false', got {value!r}")


@dataclass(frozen=True)
class Settings:
    base_dir: str = "."
    schema_dir: str = "schemas"
    schema_id: str = ""
    json_extension: str = ".json"
    yaml_extension: str = ".yaml"
    yaml_extension_short: str = ".yml"
    yaml_as_json: bool = False
    json_exclude_regex: str = ""

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str):
                object.__setattr__(self, f.name, value.strip())

    @property
    def yaml_extensions(self) -> Tuple[str, str]:
        return (self.yaml_extension, self.yaml_extension_short)

    @property
    def base_dir_sanitized(self) -> str:
        # one trailing slash only; "/" itself is kept
        if self.base_dir.endswith("/") and len(self.base_dir) > 1:
            return self.base_dir[:-1]
        return self.base_dir or "."

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = env.get(f"INPUT_{f.name.upper()}", "").strip()
            if not raw:
                continue
            values[f.name] = parse_bool(raw, f"INPUT_{f.name.upper()}") if f.type in (bool, "bool") else raw
        return cls(**values)

"""Parse a single data file into a JSON-compatible value.

YAML files are read with a safe loader restricted to JSON-shaped data:
timestamps stay plain strings, only ``true``/``false`` are booleans (not
``yes``/``no``/``on``/``off``), and mapping keys are always strings. Every
failure is reported as ``ParseError`` with the fixed "Invalid JSON" message.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable, Union

import yaml

from .errors import ParseError

YAML_EXTENSIONS = (".yaml", ".yml")

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    return str(key)


class JsonCompatibleLoader(yaml.SafeLoader):
    """SafeLoader producing values shaped like parsed JSON."""

    def construct_mapping(self, node, deep=False):
        mapping = super().construct_mapping(node, deep=deep)
        return {_json_key(k): v for k, v in mapping.items()}


JsonCompatibleLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_TIMESTAMP_TAG, _BOOL_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
JsonCompatibleLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


def is_yaml(path: Union[str, Path], yaml_extensions: Iterable[str] = YAML_EXTENSIONS) -> bool:
    name = str(path)
    return any(ext and name.endswith(ext) for ext in yaml_extensions)


def parse_document(path: Union[str, Path], yaml_extensions: Iterable[str] = YAML_EXTENSIONS) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
        if is_yaml(path, yaml_extensions):
            return yaml.load(text, Loader=JsonCompatibleLoader)
        return json.loads(text)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as exc:
        raise ParseError(str(path)) from exc

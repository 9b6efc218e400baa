"""Shared fixtures: a schema directory and a helper to write data files."""

import json
from pathlib import Path

import pytest

PERSON_SCHEMA_ID = "https://example.com/schemas/person.json"

PERSON_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": PERSON_SCHEMA_ID,
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string"},
        "age": {"type": "integer"},
        "address": {"$ref": "address.json"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
}

ADDRESS_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://example.com/schemas/address.json",
    "type": "object",
    "required": ["city"],
    "properties": {"city": {"type": "string"}},
}


def write_json(path: Path, obj) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


def write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def schema_dir(tmp_path):
    """Schema directory holding the person and address schemas."""
    root = tmp_path / "schemas"
    write_json(root / "person.json", PERSON_SCHEMA)
    write_json(root / "address.json", ADDRESS_SCHEMA)
    return root


@pytest.fixture
def data_dir(tmp_path):
    root = tmp_path / "data"
    root.mkdir()
    return root


class RecordingLog:
    """Log sink collecting (level, message) pairs."""

    def __init__(self):
        self.records = []

    def info(self, message):
        self.records.append(("info", message))

    def error(self, message):
        self.records.append(("error", message))

    def messages(self, level):
        return [m for lvl, m in self.records if lvl == level]


@pytest.fixture
def recording_log():
    return RecordingLog()

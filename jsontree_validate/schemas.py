"""Load schema documents and compile the active validator.

Every ``*.json`` file under the schema directory is parsed, checked against
its draft's meta-schema and registered in a ``referencing.Registry`` so that
``$ref`` between the documents resolves without network access. Documents are
addressable by their ``$id`` and by their path relative to the schema
directory (with or without the ``.json`` suffix).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from jsonschema import Draft202012Validator, validators
from jsonschema.exceptions import SchemaError, ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from .errors import RegexCompileError, SchemaLoadError
from .patterns import compile_pattern

logger = logging.getLogger(__name__)

SCHEMA_GLOB = "**/*.json"

# Keywords whose values are instance data rather than subschemas.
_DATA_KEYWORDS = frozenset({"const", "default", "enum", "examples"})
# Keywords whose values map arbitrary names to subschemas.
_SCHEMA_MAPS = frozenset(
    {"$defs", "definitions", "dependencies", "dependentSchemas", "patternProperties", "properties"}
)


@dataclass(frozen=True)
class SchemaSet:
    """Schema documents loaded from one directory."""

    files: Mapping[str, Any]
    identifiers: Mapping[str, str]
    registry: Registry

    def get(self, identifier: str) -> Any:
        try:
            return self.files[self.identifiers[identifier]]
        except KeyError:
            known = ", ".join(sorted(self.identifiers))
            raise SchemaLoadError(f"schema {identifier!r} not found (known: {known})") from None

    def select(self, identifier: Optional[str] = None) -> Any:
        """Return the target schema; without an identifier there must be exactly one document."""
        if identifier:
            return self.get(identifier)
        if len(self.files) == 1:
            return next(iter(self.files.values()))
        raise SchemaLoadError(
            f"{len(self.files)} schema documents found; a schema identifier is required to pick one"
        )


def _load_json(path: Path):
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _iter_patterns(schema: Any) -> Iterator[str]:
    if isinstance(schema, list):
        for item in schema:
            yield from _iter_patterns(item)
        return
    if not isinstance(schema, dict):
        return
    for key, value in schema.items():
        if key in _DATA_KEYWORDS:
            continue
        if key == "pattern" and isinstance(value, str):
            yield value
        elif key in _SCHEMA_MAPS and isinstance(value, dict):
            if key == "patternProperties":
                yield from value
            for sub in value.values():
                yield from _iter_patterns(sub)
        else:
            yield from _iter_patterns(value)


def _check_document(schema: Any, rel: str) -> None:
    cls = validators.validator_for(schema, default=Draft202012Validator)
    try:
        # The "regex" format would reject patterns carrying the marker mid-expression.
        cls.check_schema(schema, format_checker=None)
    except SchemaError as exc:
        raise SchemaLoadError(f"{rel}: invalid schema: {exc.message}") from exc
    for pattern in _iter_patterns(schema):
        try:
            compile_pattern(pattern)
        except re.error as exc:
            raise RegexCompileError(pattern, f"{rel}: {exc}") from exc


def _names_for(schema: Any, rel: str) -> List[str]:
    names = [rel, rel[: -len(".json")]]
    sid = schema.get("$id") if isinstance(schema, dict) else None
    if isinstance(sid, str) and sid:
        names.append(sid)
        if sid.endswith("#"):
            names.append(sid[:-1])
    return names


def _iter_schema_files(root: Path) -> List[Path]:
    try:
        return sorted(p for p in root.glob(SCHEMA_GLOB) if p.is_file())
    except OSError as exc:
        raise SchemaLoadError(f"cannot read schema directory {root}: {exc}") from exc


def load_schemas(schema_dir: str) -> SchemaSet:
    if not schema_dir:
        raise SchemaLoadError("no schema directory configured")
    root = Path(schema_dir)
    if not root.is_dir():
        raise SchemaLoadError(f"schema directory not found: {schema_dir}")

    paths = _iter_schema_files(root)
    if not paths:
        raise SchemaLoadError(f"no schema documents found in {schema_dir}")

    files: Dict[str, Any] = {}
    identifiers: Dict[str, str] = {}
    resources = []
    for path in paths:
        rel = path.relative_to(root).as_posix()
        try:
            schema = _load_json(path)
        except (OSError, ValueError) as exc:
            raise SchemaLoadError(f"cannot load schema {path}: {exc}") from exc
        _check_document(schema, rel)

        files[rel] = schema
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        for name in _names_for(schema, rel):
            owner = identifiers.get(name)
            if owner is not None and owner != rel:
                raise SchemaLoadError(f"schema identifier {name!r} is declared by both {owner} and {rel}")
            identifiers[name] = rel
            resources.append((name, resource))
        logger.debug("loaded schema %s", rel)

    return SchemaSet(files=files, identifiers=identifiers, registry=Registry().with_resources(resources))


# Keyword implementations routing every schema regex through compile_pattern.


def _pattern(validator, patrn, instance, schema):
    if validator.is_type(instance, "string") and not compile_pattern(patrn).search(instance):
        yield ValidationError(f"{instance!r} does not match {patrn!r}")


def _pattern_properties(validator, patternProperties, instance, schema):
    if not validator.is_type(instance, "object"):
        return
    for patrn, subschema in patternProperties.items():
        regex = compile_pattern(patrn)
        for k, v in instance.items():
            if regex.search(k):
                yield from validator.descend(v, subschema, path=k, schema_path=patrn)


def _is_declared(name: str, schema: Mapping[str, Any]) -> bool:
    if name in schema.get("properties", {}):
        return True
    return any(compile_pattern(p).search(name) for p in schema.get("patternProperties", {}))


def _additional_properties(validator, aP, instance, schema):
    if not validator.is_type(instance, "object"):
        return
    extras = [name for name in instance if not _is_declared(name, schema)]
    if validator.is_type(aP, "object"):
        for extra in extras:
            yield from validator.descend(instance[extra], aP, path=extra)
    elif not aP and extras:
        if "patternProperties" in schema:
            verb = "does" if len(extras) == 1 else "do"
            joined = ", ".join(repr(each) for each in sorted(extras))
            patterns = ", ".join(repr(each) for each in sorted(schema["patternProperties"]))
            yield ValidationError(f"{joined} {verb} not match any of the regexes: {patterns}")
        else:
            verb = "was" if len(extras) == 1 else "were"
            joined = ", ".join(repr(each) for each in extras)
            yield ValidationError(f"Additional properties are not allowed ({joined} {verb} unexpected)")


def _evaluated_keys(validator, instance, schema) -> List[str]:
    """Instance keys evaluated by ``schema``, matching ``patternProperties`` through compile_pattern."""
    if validator.is_type(schema, "boolean"):
        return []
    keys: List[str] = []

    for ref_keyword in ("$ref", "$dynamicRef"):
        ref = schema.get(ref_keyword)
        if ref is not None:
            resolved = validator._resolver.lookup(ref)
            keys.extend(
                _evaluated_keys(
                    validator.evolve(schema=resolved.contents, _resolver=resolved.resolver),
                    instance,
                    resolved.contents,
                )
            )

    for keyword in ("properties", "additionalProperties", "unevaluatedProperties"):
        if keyword in schema:
            value = schema[keyword]
            if validator.is_type(value, "boolean") and value:
                keys.extend(instance)
            elif validator.is_type(value, "object"):
                keys.extend(name for name in value if name in instance)

    for patrn in schema.get("patternProperties", {}):
        regex = compile_pattern(patrn)
        keys.extend(name for name in instance if regex.search(name))

    for name, subschema in schema.get("dependentSchemas", {}).items():
        if name in instance:
            keys.extend(_evaluated_keys(validator, instance, subschema))

    for keyword in ("allOf", "oneOf", "anyOf"):
        for subschema in schema.get(keyword, []):
            if next(validator.descend(instance, subschema), None) is None:
                keys.extend(_evaluated_keys(validator, instance, subschema))

    if "if" in schema:
        if validator.evolve(schema=schema["if"]).is_valid(instance):
            keys.extend(_evaluated_keys(validator, instance, schema["if"]))
            if "then" in schema:
                keys.extend(_evaluated_keys(validator, instance, schema["then"]))
        elif "else" in schema:
            keys.extend(_evaluated_keys(validator, instance, schema["else"]))

    return keys


def _unevaluated_properties(validator, uP, instance, schema):
    if not validator.is_type(instance, "object"):
        return
    evaluated = set(_evaluated_keys(validator, instance, schema))
    unevaluated = [
        name
        for name in instance
        if name not in evaluated and any(True for _ in validator.descend(instance[name], uP, path=name, schema_path=name))
    ]
    if not unevaluated:
        return
    verb = "was" if len(unevaluated) == 1 else "were"
    if uP is False:
        joined = ", ".join(repr(each) for each in sorted(unevaluated))
        yield ValidationError(f"Unevaluated properties are not allowed ({joined} {verb} unexpected)")
    else:
        joined = ", ".join(repr(each) for each in unevaluated)
        yield ValidationError(
            f"Unevaluated properties are not valid under the given schema ({joined} {verb} unevaluated and invalid)"
        )


PATTERN_KEYWORDS = {
    "additionalProperties": _additional_properties,
    "pattern": _pattern,
    "patternProperties": _pattern_properties,
    "unevaluatedProperties": _unevaluated_properties,
}


def compile_validator(schemas: SchemaSet, schema_id: Optional[str] = None):
    """Build a validator for the selected schema, resolving ``$ref`` through the set's registry."""
    target = schemas.select(schema_id)
    base = validators.validator_for(target, default=Draft202012Validator)
    # only override keywords the draft knows about
    keywords = {k: v for k, v in PATTERN_KEYWORDS.items() if k in base.VALIDATORS}
    cls = validators.extend(base, keywords)
    return cls(target, registry=schemas.registry, format_checker=base.FORMAT_CHECKER)


def build_validator(schema_dir: str, schema_id: Optional[str] = None):
    schemas = load_schemas(schema_dir)
    validator = compile_validator(schemas, schema_id)
    logger.debug("compiled validator for %s", schema_id or next(iter(schemas.files)))
    return validator

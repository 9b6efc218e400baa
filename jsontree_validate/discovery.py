"""Discover candidate data files under a base directory."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


def build_glob(
    json_extension: str,
    yaml_as_json: bool = False,
    yaml_extension: str = ".yaml",
    yaml_extension_short: str = ".yml",
) -> str:
    if not yaml_as_json:
        return f"**/*{json_extension}"
    return f"**/*{{{json_extension},{yaml_extension},{yaml_extension_short}}}"


def _split_alternatives(body: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(body):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(body[start:i])
            start = i + 1
    parts.append(body[start:])
    return parts


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternations, e.g. ``*{.json,.yml}`` -> ``['*.json', '*.yml']``.

    Unbalanced braces are left as literal text.
    """
    open_at = pattern.find("{")
    if open_at == -1:
        return [pattern]
    depth = 0
    for i in range(open_at, len(pattern)):
        if pattern[i] == "{":
            depth += 1
        elif pattern[i] == "}":
            depth -= 1
            if depth == 0:
                head, body, tail = pattern[:open_at], pattern[open_at + 1 : i], pattern[i + 1 :]
                out: List[str] = []
                for alt in _split_alternatives(body):
                    out.extend(expand_braces(head + alt + tail))
                return out
    return [pattern]


def _is_hidden(rel: Path) -> bool:
    return any(part.startswith(".") for part in rel.parts)


def _iter_globs(glob_patterns: Iterable[str], base: Path) -> Iterable[str]:
    out: list[str] = []
    for pat in glob_patterns:
        for p in base.glob(pat):
            rel = p.relative_to(base)
            if _is_hidden(rel) or not p.is_file():
                continue
            out.append(rel.as_posix())
    # unique, stable
    seen = set()
    for rel in sorted(out):
        if rel in seen:
            continue
        seen.add(rel)
        yield rel


def discover_files(base_dir: str, pattern: str) -> List[str]:
    """Return the relative paths under ``base_dir`` matching ``pattern``, sorted and de-duplicated."""
    base = Path(base_dir or ".")
    if not base.is_dir():
        return []
    return list(_iter_globs(expand_braces(pattern), base))

"""Dotted/indexed path access over JSON-shaped assumption trees.

Paths look like ``assumptions.customers.segments[0].volume.base_value``. A purely
numeric segment (``baseline_costs.0.savings_potential_pct``) indexes a list as well.
``set_nested_value`` never mutates its input: the root and every container along
the path are shallow-copied and all siblings are shared with the original.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from caseflow.defaults import MAX_PATH_INDEX


_SEGMENT_RE = re.compile(r"^([^\[\]]+)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")
_UNSAFE_PATTERNS = (
    re.compile(r"__\w+__"),
    re.compile(r"constructor", re.IGNORECASE),
    re.compile(r"prototype", re.IGNORECASE),
    re.compile(r"\.\."),
    re.compile(r"[<>{}]"),
)

KEY = "key"
INDEX = "index"


def _check_index(index: int, path: str) -> int:
    if index > MAX_PATH_INDEX:
        raise ValueError(f"Array index too large in path {path!r}: {index} (maximum {MAX_PATH_INDEX}).")
    return index


def parse_path(path: str) -> list[tuple[str, Any]]:
    """Split a path into ``(KEY, name)`` / ``(INDEX, i)`` steps."""
    if not isinstance(path, str) or not path.strip():
        raise ValueError("Path must be a non-empty string.")
    steps: list[tuple[str, Any]] = []
    for part in path.split("."):
        if not part:
            raise ValueError(f"Empty segment in path {path!r}.")
        if part.isdigit():
            steps.append((INDEX, _check_index(int(part), path)))
            continue
        match = _SEGMENT_RE.match(part)
        if match is None:
            raise ValueError(f"Invalid path segment {part!r} in {path!r}. Expected 'name' or 'name[index]'.")
        steps.append((KEY, match.group(1)))
        for raw_index in _INDEX_RE.findall(match.group(2)):
            steps.append((INDEX, _check_index(int(raw_index), path)))
    return steps


def get_nested_value(root: Any, path: str) -> Any:
    """Return the value at ``path`` or None when any node along it is missing."""
    steps = parse_path(path)
    current = root
    for kind, token in steps:
        if kind == KEY:
            if not isinstance(current, dict) or token not in current:
                return None
            current = current[token]
        else:
            if not isinstance(current, list) or token >= len(current):
                return None
            current = current[token]
    return current


def has_nested_path(root: Any, path: str) -> bool:
    try:
        return get_nested_value(root, path) is not None
    except ValueError:
        return False


def _empty_container(kind: str) -> Any:
    return {} if kind == KEY else []


def _assign(node: Any, steps: list[tuple[str, Any]], value: Any, path: str) -> Any:
    kind, token = steps[0]
    rest = steps[1:]
    if node is None:
        node = _empty_container(kind)

    if kind == KEY:
        if not isinstance(node, dict):
            raise ValueError(f"Expected an object at {token!r} in path {path!r}, got {type(node).__name__}.")
        copy = dict(node)
        if rest:
            copy[token] = _assign(copy.get(token), rest, value, path)
        else:
            copy[token] = value
        return copy

    if not isinstance(node, list):
        raise ValueError(f"Expected an array at index [{token}] in path {path!r}, got {type(node).__name__}.")
    copy = list(node)
    created = token >= len(copy)
    while len(copy) <= token:
        copy.append({})
    if rest:
        # A slot created here takes the container kind of the next step.
        copy[token] = _assign(None if created else copy[token], rest, value, path)
    else:
        copy[token] = value
    return copy


def set_nested_value(root: dict, path: str, value: Any) -> dict:
    """Return a new root with ``value`` stored at ``path``.

    Missing intermediate containers are materialized as objects before a named
    step and as arrays before an index step; skipped array slots hold empty objects.
    """
    if not isinstance(root, dict):
        raise ValueError("Root must be a mapping.")
    steps = parse_path(path)
    return _assign(root, steps, value, path)


def list_paths(obj: Any, prefix: str = "", max_depth: int = 10) -> list[str]:
    """Enumerate every reachable path, depth-first, up to ``max_depth`` levels."""
    return list(_iter_paths(obj, prefix, max_depth))


def _iter_paths(obj: Any, prefix: str, max_depth: int) -> Iterator[str]:
    if max_depth <= 0:
        return
    if isinstance(obj, dict):
        for key, child in obj.items():
            current = f"{prefix}.{key}" if prefix else str(key)
            yield current
            yield from _iter_paths(child, current, max_depth - 1)
    elif isinstance(obj, list):
        for idx, child in enumerate(obj):
            current = f"{prefix}[{idx}]"
            yield current
            yield from _iter_paths(child, current, max_depth - 1)


def is_safe_path(path: str) -> bool:
    if not isinstance(path, str) or not path:
        return False
    return not any(p.search(path) for p in _UNSAFE_PATTERNS)


def apply_updates(root: dict, updates: dict[str, Any]) -> dict:
    """Apply ``{path: value}`` updates in order, rejecting unsafe paths."""
    result = root
    for path, value in updates.items():
        if not is_safe_path(path):
            raise ValueError(f"Invalid or unsafe path: {path}")
        result = set_nested_value(result, path, value)
    return result

"""Helpers for reading untyped TOML tables.

Use these at the config boundary; they validate at runtime and narrow types
for static checkers.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_str_tuple(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    """Get a non-empty list of non-empty strings as a tuple."""
    value = table.get(key)
    if not isinstance(value, list):
        return None
    items = cast(list[object], value)
    out = tuple(s.strip() for s in items if isinstance(s, str) and s.strip())
    if len(out) != len(items) or not out:
        return None
    return out


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table from a mapping."""
    return as_str_dict(table.get(key))

"""Typed accessors over parsed TOML (release.toml, Cargo.toml).

tomllib hands back ``dict[str, Any]``; these narrow values at the boundary
so the rest of the code never touches untyped data.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    return isinstance(obj, dict) and all(
        isinstance(k, str) for k in cast(dict[object, object], obj)
    )


def as_str_dict(obj: object) -> StrDict | None:
    return obj if is_str_dict(obj) else None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Nested table at key, e.g. ``[package]`` or ``[workspace.package]``."""
    return as_str_dict(table.get(key))


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Stripped string at key; None when absent, not a string, or blank."""
    value = table.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    return value if isinstance(value, bool) else None


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """List of non-blank strings at key.

    None when absent or when any item is not a non-blank string, so a typo
    in one entry rejects the whole list.
    """
    value = table.get(key)
    if not isinstance(value, list):
        return None
    out: list[str] = []
    for item in cast(list[object], value):
        if not isinstance(item, str) or not item.strip():
            return None
        out.append(item.strip())
    return out

"""Utility helpers shared by the admonish configuration loader."""

from __future__ import annotations

import collections.abc as cabc
import enum
import typing as typ

from mdbook_admonish.errors import AdmonishConfigError

EnumT = typ.TypeVar("EnumT", bound=enum.Enum)


def _normalize_classes(value: object, *, key: str) -> tuple[str, ...]:
    """Normalize class definitions into a tuple of non-empty strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(segment for segment in value.split() if segment)
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            normalized.extend(_normalize_classes(_expect_str(segment, key=key), key=key))
        return tuple(normalized)
    msg = f"'{key}' must be a string or a list of strings, got {value!r}."
    raise AdmonishConfigError(msg)


def _expect_mapping(value: object, *, key: str) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` as a mapping; ``None`` becomes an empty one."""
    if value is None:
        return {}
    if not isinstance(value, cabc.Mapping):
        msg = f"'{key}' must be a table, got {value!r}."
        raise AdmonishConfigError(msg)
    return value


def _expect_str(value: object, *, key: str) -> str:
    if not isinstance(value, str):
        msg = f"'{key}' must be a string, got {value!r}."
        raise AdmonishConfigError(msg)
    return value


def _optional_str(value: object | None, *, key: str) -> str | None:
    """Return a string value or None when absent."""
    if value is None:
        return None
    return _expect_str(value, key=key)


def _expect_bool(value: object, *, key: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"'{key}' must be true or false, got {value!r}."
        raise AdmonishConfigError(msg)
    return value


def _str_list(value: object, *, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = f"'{key}' must be a list of strings, got {value!r}."
        raise AdmonishConfigError(msg)
    return tuple(_expect_str(item, key=key) for item in value)


def _parse_enum(enum_type: type[EnumT], value: object, *, key: str) -> EnumT:
    """Parse ``value`` into ``enum_type``, listing allowed values on failure."""
    for member in enum_type:
        if member.value == value:
            return member
    allowed = ", ".join(repr(member.value) for member in enum_type)
    msg = f"Invalid value {value!r} for '{key}': expected one of {allowed}."
    raise AdmonishConfigError(msg)


def _lookup(table: typ.Mapping[str, typ.Any], *names: str) -> object | None:
    """Return the first present key of ``names`` (snake or kebab spelling)."""
    for name in names:
        if name in table:
            return table[name]
    return None

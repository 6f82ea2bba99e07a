"""Utility helpers shared by the sitepress configuration loader.

Each helper validates one value against the schema and raises
:class:`~sitepress.errors.ConfigurationError` naming the dotted field path, so
typos in deeply nested optional fields cannot be silently accepted.
"""

from __future__ import annotations

import typing as typ

from sitepress.errors import ConfigurationError

_MISSING = object()


def _field(prefix: str, key: str) -> str:
    """Join a dotted field path."""
    return f"{prefix}.{key}" if prefix else key


def _check_keys(
    payload: typ.Mapping[str, typ.Any], allowed: typ.Collection[str], prefix: str
) -> None:
    """Reject keys that are not part of the schema at this level."""
    for key in payload:
        if key not in allowed:
            known = ", ".join(sorted(allowed))
            raise ConfigurationError(
                _field(prefix, str(key)), f"unrecognized option (expected one of: {known})"
            )


def _require_mapping(value: object, field: str) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` when it is a mapping, raising otherwise."""
    if not isinstance(value, dict):
        raise ConfigurationError(field, "expected a mapping")
    return value


def _require_list(value: object, field: str) -> list[typ.Any]:
    """Return ``value`` when it is a list, raising otherwise."""
    if not isinstance(value, list):
        raise ConfigurationError(field, "expected a list")
    return value


def _get_str(
    payload: typ.Mapping[str, typ.Any],
    key: str,
    prefix: str,
    default: str | None | object = _MISSING,
) -> typ.Any:
    """Return a string option; missing options without a default are errors."""
    field = _field(prefix, key)
    value = payload.get(key, _MISSING)
    if value is _MISSING or value is None:
        if default is _MISSING:
            raise ConfigurationError(field, "required option is missing")
        return default
    if not isinstance(value, str):
        raise ConfigurationError(field, "expected a string")
    return value


def _get_bool(
    payload: typ.Mapping[str, typ.Any], key: str, prefix: str, *, default: bool
) -> bool:
    """Return a boolean option or its default."""
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(_field(prefix, key), "expected true or false")
    return value


def _get_int(
    payload: typ.Mapping[str, typ.Any],
    key: str,
    prefix: str,
    *,
    default: int,
    minimum: int | None = None,
) -> int:
    """Return an integer option, enforcing an optional lower bound."""
    field = _field(prefix, key)
    value = payload.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(field, "expected an integer")
    if minimum is not None and value < minimum:
        raise ConfigurationError(field, f"must be at least {minimum}")
    return value


def _get_str_list(
    payload: typ.Mapping[str, typ.Any], key: str, prefix: str
) -> tuple[str, ...]:
    """Return a list of strings as a tuple."""
    field = _field(prefix, key)
    value = payload.get(key)
    if value is None:
        return ()
    items = _require_list(value, field)
    for idx, item in enumerate(items):
        if not isinstance(item, str):
            raise ConfigurationError(f"{field}[{idx}]", "expected a string")
    return tuple(items)


__all__ = [
    "_check_keys",
    "_field",
    "_get_bool",
    "_get_int",
    "_get_str",
    "_get_str_list",
    "_require_list",
    "_require_mapping",
]

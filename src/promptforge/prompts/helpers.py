"""Template helper library.

Pure, deterministic functions callable from templates
(``{{capitalize language}}``, ``{{join items " | "}}``). ``HELPERS`` is the
fixed registry, built once at import time; ``pybars_helpers()`` adapts it to
pybars' calling convention, which passes the current context first.

Falsiness and equality follow template semantics rather than Python's:
empty lists are truthy, ``1 == True`` is false.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WORD = re.compile(r"\S+")


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, list | tuple)


def is_falsy(value: Any) -> bool:
    """Absent, null, empty string, zero, NaN and false are falsy."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if _is_number(value):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def to_display_string(value: Any) -> str:
    """Stringify a value the way template output shows it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if _is_sequence(value):
        return ",".join(to_display_string(v) for v in value)
    return str(value)


# String helpers


def capitalize(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value[:1].upper() + value[1:]


def upper(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.upper()


def lower(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.lower()


def title_case(value: Any) -> Any:
    """Uppercase the first letter of each whitespace-delimited word, lowercase the rest."""
    if not isinstance(value, str):
        return value
    return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), value)


def kebab_case(value: Any) -> Any:
    """``apiDocumentation`` -> ``api-documentation``."""
    if not isinstance(value, str):
        return value
    return _CAMEL_BOUNDARY.sub(r"\1-\2", value).lower()


# Array helpers


def join(values: Any, separator: Any = ", ") -> str:
    if not _is_sequence(values):
        return ""
    return to_display_string(separator).join(to_display_string(v) for v in values)


def first(values: Any) -> Any:
    if not _is_sequence(values) or not values:
        return ""
    return values[0]


def last(values: Any) -> Any:
    if not _is_sequence(values) or not values:
        return ""
    return values[-1]


def length(values: Any) -> int:
    if not _is_sequence(values):
        return 0
    return len(values)


# Utility helpers


def default_value(value: Any, fallback: Any) -> Any:
    return fallback if is_falsy(value) else value


def eq(a: Any, b: Any) -> bool:
    """Strict equality: values of different kinds are never equal."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if _is_number(a) and _is_number(b):
        return a == b
    if type(a) is not type(b):
        return False
    return bool(a == b)


def neq(a: Any, b: Any) -> bool:
    return not eq(a, b)


def gt(a: Any, b: Any) -> bool:
    if not (_is_number(a) and _is_number(b)):
        return False
    return a > b


def lt(a: Any, b: Any) -> bool:
    if not (_is_number(a) and _is_number(b)):
        return False
    return a < b


def format_number(value: Any) -> Any:
    """Group thousands with commas, keeping at most three fraction digits."""
    if not _is_number(value):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "∞" if value > 0 else "-∞"
        formatted = f"{value:,.3f}".rstrip("0").rstrip(".")
        return "0" if formatted in ("-0", "") else formatted
    return f"{value:,}"


HELPERS: Mapping[str, Callable[..., Any]] = MappingProxyType(
    {
        "capitalize": capitalize,
        "upper": upper,
        "lower": lower,
        "titleCase": title_case,
        "kebabCase": kebab_case,
        "join": join,
        "first": first,
        "last": last,
        "length": length,
        "default": default_value,
        "eq": eq,
        "neq": neq,
        "gt": gt,
        "lt": lt,
        "formatNumber": format_number,
    }
)

HELPER_NAMES = frozenset(HELPERS)


def _bind(func: Callable[..., Any]) -> Callable[..., Any]:
    def helper(this: Any, *args: Any) -> Any:
        return func(*args)

    helper.__name__ = func.__name__
    return helper


def pybars_helpers() -> dict[str, Callable[..., Any]]:
    """Return the registry wrapped for pybars (``helper(this, *args)``)."""
    return {name: _bind(func) for name, func in HELPERS.items()}

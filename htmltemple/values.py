"""Runtime values of the template language: construction, copying, comparison and display.

Values are plain Python objects:

* null is ``None``, booleans are ``bool``, integers ``int``, floats ``float``
* strings are ``str``, raw markup is :class:`Html`
* arrays are ``list``, records are :class:`Record`
* ranges are :class:`RangeExclusiveOpen`, :class:`RangeExclusiveClosed`
  and :class:`RangeInclusive`
* functions are any callable
"""

from __future__ import annotations

import math
import unicodedata
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Html:
    """Markup that is written to the output as it is, without escaping."""

    text: str = ""

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class RangeExclusiveOpen:
    """A range with no end: ``start..`` or ``..``."""

    start: Optional[int] = None


@dataclass(frozen=True)
class RangeExclusiveClosed:
    """A range that stops before its end: ``start..end`` or ``..end``."""

    start: Optional[int]
    end: int


@dataclass(frozen=True)
class RangeInclusive:
    """A range that includes its end: ``start..=end`` or ``..=end``."""

    start: Optional[int]
    end: int


_RANGE_TYPES = (RangeExclusiveOpen, RangeExclusiveClosed, RangeInclusive)


class Record:
    """An ordered mapping from string keys to values."""

    __slots__ = ("entries",)

    def __init__(self, entries: Iterable[tuple[str, Any]] = ()) -> None:
        self.entries: list[tuple[str, Any]] = list(entries)

    def insert(self, key: str, value: Any) -> None:
        """Replace the value under ``key`` in place, or append a new entry."""
        for position, (existing, _) in enumerate(self.entries):
            if existing == key:
                self.entries[position] = (existing, value)
                return
        self.entries.append((key, value))

    def get(self, key: str) -> Any:
        """Return the first value stored under ``key``; raise KeyError if absent."""
        for existing, value in self.entries:
            if existing == key:
                return value
        raise KeyError(key)

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    def summarize_members(self) -> str:
        """The quoted keys, separated by commas, as used in error messages."""
        return ", ".join(_debug_str(key) for key in self.keys())

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self.entries)

    def __contains__(self, key: object) -> bool:
        return any(existing == key for existing, _ in self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return values_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Record({self.entries!r})"


def from_json(data: Any) -> Any:
    """Convert JSON-like Python data into template values.

    Integers outside the 64-bit signed range become floats, non-finite floats
    become null, tuples become arrays and mappings become records. Values that
    already are template values are deep-copied.
    """
    if data is None or isinstance(data, bool):
        return data
    if isinstance(data, int):
        if _I64_MIN <= data <= _I64_MAX:
            return data
        try:
            return float(data)
        except OverflowError:
            return math.inf if data > 0 else -math.inf
    if isinstance(data, float):
        return data if math.isfinite(data) else None
    if isinstance(data, str):
        return data
    if isinstance(data, (Html, Record, *_RANGE_TYPES)):
        return deep_clone(data)
    if isinstance(data, (list, tuple)):
        return [from_json(item) for item in data]
    if isinstance(data, dict):
        return Record((_json_key(key), from_json(value)) for key, value in data.items())
    raise TypeError(f"{type(data).__name__} cannot be converted to a template value")


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise TypeError(f"record keys must be strings, not {type(key).__name__}")


def deep_clone(value: Any) -> Any:
    """Copy arrays and records recursively; other values are immutable and shared."""
    if isinstance(value, list):
        return [deep_clone(item) for item in value]
    if isinstance(value, Record):
        return Record((key, deep_clone(item)) for key, item in value)
    return value


_ESCAPES = {
    "\0": "\\0",
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    '"': '\\"',
}


def _is_printable(char: str) -> bool:
    category = unicodedata.category(char)
    return not (category.startswith("C") or category in ("Zl", "Zp"))


def _debug_str(text: str) -> str:
    parts = ['"']
    for char in text:
        escaped = _ESCAPES.get(char)
        if escaped is None and not _is_printable(char):
            escaped = f"\\u{{{ord(char):x}}}"
        parts.append(escaped if escaped is not None else char)
    parts.append('"')
    return "".join(parts)


def _format_float(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    text = format(Decimal(repr(number)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_bound(bound: Optional[int]) -> str:
    return "" if bound is None else str(bound)


def _debug_sequence(opening: str, closing: str, items: list[str], pretty: bool) -> str:
    if not items:
        return opening + closing
    if not pretty:
        return opening + ", ".join(items) + closing
    body = "".join(
        "\n".join("    " + line for line in (item + ",").split("\n")) + "\n" for item in items
    )
    return f"{opening}\n{body}{closing}"


def display(value: Any, pretty: bool = False) -> str:
    """Render a value the way it is shown in diagnostics.

    With ``pretty`` set, arrays and records are spread over several indented lines.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return _debug_str(value)
    if isinstance(value, Html):
        return "{{" + value.text + "}}"
    if isinstance(value, list):
        return _debug_sequence("[", "]", [display(item, pretty) for item in value], pretty)
    if isinstance(value, Record):
        items = [f"{_debug_str(key)}: {display(item, pretty)}" for key, item in value]
        return _debug_sequence("{", "}", items, pretty)
    if isinstance(value, RangeExclusiveOpen):
        return _format_bound(value.start) + ".."
    if isinstance(value, RangeExclusiveClosed):
        return f"{_format_bound(value.start)}..{value.end}"
    if isinstance(value, RangeInclusive):
        return f"{_format_bound(value.start)}..={value.end}"
    if callable(value):
        return "fn (...) => (...)"
    raise TypeError(f"{type(value).__name__} is not a template value")


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality that never mixes types: ``1``, ``1.0`` and ``true`` all differ."""
    left_type = type_name(left)
    if left_type != type_name(right):
        return False
    if left_type == "array":
        return len(left) == len(right) and all(
            values_equal(x, y) for x, y in zip(left, right)
        )
    if left_type == "record":
        return len(left) == len(right) and all(
            lk == rk and values_equal(lv, rv) for (lk, lv), (rk, rv) in zip(left, right)
        )
    if left_type == "range":
        return type(left) is type(right) and left == right
    if left_type == "function":
        return left is right
    return left == right


def type_name(value: Any) -> str:
    """The name of the value's type in the template language."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Html):
        return "html"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Record):
        return "record"
    if isinstance(value, _RANGE_TYPES):
        return "range"
    if callable(value):
        return "function"
    raise TypeError(f"{type(value).__name__} is not a template value")
"""Errors raised while a template runs, with a chain of explanatory entries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .values import type_name


class ErrorKind(Enum):
    """The kinds of runtime error, each with its leading message."""

    UNDEFINED = "undefined"
    EXPECTED_ARRAY = "expected_array"
    EXPECTED_RECORD = "expected_record"
    EXPECTED_RANGE_INTEGER = "expected_range_integer"
    EXPECTED_NUMBER = "expected_number"
    UNDEFINED_MEMBER = "undefined_member"
    EXPECTED_INDEXABLE = "expected_indexable"
    EXPECTED_FUNCTION = "expected_function"
    EXPECTED_ITERABLE = "expected_iterable"
    CANNOT_STRINGIFY_HTML = "cannot_stringify_html"
    EXPECTED_MEASUREABLE = "expected_measureable"
    CANNOT_COMPARE = "cannot_compare"
    CANNOT_ADD = "cannot_add"
    CANNOT_SUBTRACT = "cannot_subtract"
    CANNOT_MULTIPLY = "cannot_multiply"
    CANNOT_DIVIDE = "cannot_divide"
    CANNOT_REMAIN = "cannot_remain"
    CANNOT_REPEAT_ARRAY_NEGATIVE = "cannot_repeat_array_negative"
    CANNOT_REPEAT_STRING_NEGATIVE = "cannot_repeat_string_negative"
    OUT_OF_BOUNDS = "out_of_bounds"
    METHOD_DOES_NOT_EXIST = "method_does_not_exist"

    @property
    def template(self) -> str:
        """The message, with ``{}`` where arguments go."""
        return _TEMPLATES[self]


_TEMPLATES = {
    ErrorKind.UNDEFINED: "a variavel não foi encontrada",
    ErrorKind.EXPECTED_ARRAY: "o valor não é um array",
    ErrorKind.EXPECTED_RECORD: "o valor não é um record",
    ErrorKind.EXPECTED_RANGE_INTEGER: "o valor não é um integer, ranges precisam de integers",
    ErrorKind.EXPECTED_NUMBER: "o valor não é um number",
    ErrorKind.UNDEFINED_MEMBER: "esse membro do record não existe",
    ErrorKind.EXPECTED_INDEXABLE: "esperado algo indexável, ou seja string, array ou record",
    ErrorKind.EXPECTED_FUNCTION: "esperado uma função",
    ErrorKind.EXPECTED_ITERABLE: "esperado algo iterável, ou seja null, array, record e range",
    ErrorKind.CANNOT_STRINGIFY_HTML: "não é possível converter html em uma string",
    ErrorKind.EXPECTED_MEASUREABLE: (
        "esperado algo medível, ou seja, null, string, array, record e range"
    ),
    ErrorKind.CANNOT_COMPARE: "esses valores não podem ser comparados",
    ErrorKind.CANNOT_ADD: "esses valores não podem ser somados",
    ErrorKind.CANNOT_SUBTRACT: "esses valores não podem ser subtraidos",
    ErrorKind.CANNOT_MULTIPLY: "esses valores não podem ser multiplicados",
    ErrorKind.CANNOT_DIVIDE: "esses valores não podem ser dividos",
    ErrorKind.CANNOT_REMAIN: "esses valores não podem ser módulados",
    ErrorKind.CANNOT_REPEAT_ARRAY_NEGATIVE: (
        "não é possível repetir um array um número negativo de vezes"
    ),
    ErrorKind.CANNOT_REPEAT_STRING_NEGATIVE: (
        "não é possível repetir um array um número negativo de vezes"
    ),
    ErrorKind.OUT_OF_BOUNDS: "índice inválido",
    ErrorKind.METHOD_DOES_NOT_EXIST: "o método {} não existe neste valor",
}

_TYPE_PHRASES = {
    "null": "um null",
    "boolean": "um boolean",
    "integer": "um integer",
    "float": "um float",
    "string": "um string",
    "html": "um html",
    "array": "um array",
    "record": "um record",
    "range": "um range",
    "function": "uma função",
}


@dataclass
class ErrorEntry:
    """One line of an error: a description, where it happened and the value involved.

    ``has_value`` tells a null value apart from no value at all.
    """

    description: str
    source: Optional[Any] = None
    value: Any = None
    has_value: bool = False


class TemplateRuntimeError(Exception):
    """An error in a running template.

    The first entry states the error; later entries explain it. Every annotating
    method changes the error in place and returns it, so calls can be chained.
    """

    def __init__(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.entries: list[ErrorEntry] = [ErrorEntry(message)]

    @classmethod
    def from_kind(cls, kind: ErrorKind, *args: Any) -> TemplateRuntimeError:
        return cls(kind.template.format(*args), kind)

    def because(self, message: str) -> TemplateRuntimeError:
        """Add an explanatory entry."""
        self.entries.append(ErrorEntry(message))
        return self

    def at(self, source: Any) -> TemplateRuntimeError:
        """Set where the last entry happened."""
        self.entries[-1].source = source
        return self

    def with_value(self, value: Any) -> TemplateRuntimeError:
        """Attach the value that the last entry is about."""
        entry = self.entries[-1]
        entry.value = value
        entry.has_value = True
        return self

    def maybe(
        self,
        condition: bool,
        annotate: Callable[[TemplateRuntimeError], TemplateRuntimeError],
    ) -> TemplateRuntimeError:
        """Apply ``annotate`` only when ``condition`` holds."""
        return annotate(self) if condition else self

    def because_type(self, value: Any) -> TemplateRuntimeError:
        return self._because_typed("o valor é", value)

    def because_left_type(self, value: Any) -> TemplateRuntimeError:
        return self._because_typed("o valor a esquerda é", value)

    def because_right_type(self, value: Any) -> TemplateRuntimeError:
        return self._because_typed("o valor a direita é", value)

    def _because_typed(self, prefix: str, value: Any) -> TemplateRuntimeError:
        phrase = _TYPE_PHRASES[type_name(value)]
        self.entries.append(ErrorEntry(f"{prefix} {phrase}", value=value, has_value=True))
        return self

    def __str__(self) -> str:
        return "; ".join(entry.description for entry in self.entries)
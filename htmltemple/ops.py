"""Operators and conversions on template values: truthiness, rendering, iteration and arithmetic.

Integer arithmetic works on 64-bit signed integers and wraps around on overflow.
Float arithmetic follows IEEE 754, so dividing a float by zero gives an infinity
or NaN. Integer division and remainder by zero raise :class:`ZeroDivisionError`.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable
from typing import Any, Optional

from .errors import ErrorKind, TemplateRuntimeError
from .values import (
    Html,
    RangeExclusiveClosed,
    RangeExclusiveOpen,
    RangeInclusive,
    Record,
    display,
    type_name,
    values_equal,
)

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_NUMERIC = ("boolean", "integer", "float")

_RANGE_NOT_ITERABLE = (
    "ranges só são iteráveis se tiverem o começo e fim especificado, "
    "ranges como (..3), (4..), (..=7) não são iteráveis"
)
_RANGE_NOT_ENUMERABLE = (
    "ranges não podem ser iterados com um índice, "
    "como em (for i, j in 1..2), use apenas uma variável"
)
_CONCAT_HINT = (
    'se você estiver tentando concatenar string ou html, use o operador de concatenação "&"'
)
_NOT_NUMERIC = object()


def _wrap(number: int) -> int:
    return (number - _I64_MIN) % 2**64 + _I64_MIN


def _in_i64(number: int) -> bool:
    return _I64_MIN <= number <= _I64_MAX


def _sign(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def is_null(value: Any) -> bool:
    return value is None


def to_bool(value: Any) -> bool:
    """The truthiness of a value in conditions and logical operators."""
    kind = type_name(value)
    if kind == "null":
        return False
    if kind in _NUMERIC or kind in ("string", "array", "record"):
        return bool(value)
    if kind == "html":
        return bool(value.text)
    if isinstance(value, RangeExclusiveClosed):
        if value.start is not None:
            return value.start < value.end
        return value.end != _I64_MIN
    if isinstance(value, RangeInclusive):
        return value.start is None or value.start <= value.end
    return True


def _escape_text(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def to_html(value: Any) -> str:
    """Render a value as markup; strings are escaped, html is written as it is."""
    kind = type_name(value)
    if kind == "integer":
        return str(value)
    if kind == "float":
        return display(value)
    if kind == "string":
        return _escape_text(value)
    if kind == "html":
        return value.text
    if kind == "array":
        return "".join(to_html(item) for item in value)
    if kind == "record":
        return "".join(to_html(item) for _, item in value)
    return ""


def into_string(value: Any) -> str:
    """Convert a value to plain text; html cannot be converted."""
    kind = type_name(value)
    if kind == "integer":
        return str(value)
    if kind == "float":
        return display(value)
    if kind == "string":
        return value
    if kind == "html":
        raise TemplateRuntimeError.from_kind(ErrorKind.CANNOT_STRINGIFY_HTML)
    if kind == "array":
        return "".join(into_string(item) for item in value)
    if kind == "record":
        return "".join(into_string(item) for _, item in value)
    return ""


def into_html(value: Any) -> Html:
    """Return html unchanged, or render any other value into html."""
    if isinstance(value, Html):
        return value
    return Html(to_html(value))


def for_each(
    value: Any,
    body: Callable[[Any], Any],
    value_source: Optional[Any] = None,
) -> list:
    """Collect ``body(item)`` for every item of a null, array, record or bounded range."""
    if isinstance(value, RangeExclusiveClosed) and value.start is not None:
        return [body(number) for number in range(value.start, value.end)]
    if isinstance(value, RangeInclusive) and value.start is not None:
        return [body(number) for number in range(value.start, value.end + 1)]
    if isinstance(value, (RangeExclusiveOpen, RangeExclusiveClosed, RangeInclusive)):
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_ITERABLE)
            .with_value(value)
            .at(value_source)
            .because(_RANGE_NOT_ITERABLE)
        )
    return for_each_enumerated(value, lambda _, item: body(item), value_source)


def for_each_enumerated(
    value: Any,
    body: Callable[[Any, Any], Any],
    value_source: Optional[Any] = None,
) -> list:
    """Collect ``body(key, item)``: positions for arrays, keys for records."""
    kind = type_name(value)
    if kind == "null":
        return []
    if kind == "array":
        return [body(position, item) for position, item in enumerate(list(value))]
    if kind == "record":
        return [body(key, item) for key, item in list(value.entries)]
    error = (
        TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_ITERABLE)
        .with_value(value)
        .at(value_source)
    )
    if kind == "range":
        error.because(_RANGE_NOT_ENUMERABLE)
    raise error


def range_integer(value: Any, value_source: Optional[Any] = None) -> int:
    """Check that a range bound is an integer and return it."""
    if type_name(value) == "integer":
        return value
    raise (
        TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_RANGE_INTEGER)
        .with_value(value)
        .at(value_source)
    )


def _spread_list(target: list, value: Any, value_source: Any, reason: str) -> None:
    if isinstance(value, list):
        target.extend(value)
        return
    raise (
        TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_ARRAY)
        .because(reason)
        .because_type(value)
        .at(value_source)
    )


def spread_args(target: list, value: Any, value_source: Optional[Any] = None) -> None:
    """Append the items of an array to a list of call arguments."""
    _spread_list(
        target, value, value_source, "você só pode mergir arrays nos argumentos de uma função"
    )


def spread_array(target: list, value: Any, value_source: Optional[Any] = None) -> None:
    """Append the items of an array to an array being built."""
    _spread_list(target, value, value_source, "você só pode mergir um array com outros arrays")


def spread_record(target: Record, value: Any, value_source: Optional[Any] = None) -> None:
    """Add the entries of a record whose keys the target does not have yet."""
    if isinstance(value, Record):
        for key, item in list(value.entries):
            if key not in target:
                target.entries.append((key, item))
        return
    raise (
        TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_RECORD)
        .because("você só pode mergir um record com outros records")
        .because_type(value)
        .at(value_source)
    )


def ptr_eq(left: Any, right: Any) -> bool:
    """Identity for arrays and records, structural equality for everything else."""
    if isinstance(left, list) and isinstance(right, list):
        return left is right
    if isinstance(left, Record) and isinstance(right, Record):
        return left is right
    return values_equal(left, right)


def negate(value: Any, op_source: Optional[Any] = None, value_source: Optional[Any] = None) -> Any:
    kind = type_name(value)
    if kind == "boolean":
        return -1 if value else 0
    if kind == "integer":
        return _wrap(-value)
    if kind == "float":
        return -value
    raise (
        TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_NUMBER)
        .with_value(value)
        .at(value_source)
        .because("o sinal de menos só trabalha com integers, floats e booleans")
        .at(op_source)
    )


def measure(value: Any, op_source: Optional[Any] = None, value_source: Optional[Any] = None) -> int:
    """The size of a value; strings and html are measured in UTF-8 bytes."""
    kind = type_name(value)
    if kind == "null":
        return 0
    if kind == "string":
        return _utf8_len(value)
    if kind == "html":
        return _utf8_len(value.text)
    if kind in ("array", "record"):
        return len(value)
    if isinstance(value, RangeExclusiveClosed) and value.start is not None:
        size = value.end - value.start
        return max(size, 0) if _in_i64(size) else 0
    if isinstance(value, RangeInclusive) and value.start is not None:
        size = value.end - value.start
        if not _in_i64(size) or not _in_i64(size + 1):
            return 0
        return max(size + 1, 0)
    raise (
        TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_MEASUREABLE)
        .with_value(value)
        .at(value_source)
        .because(
            "o operador de medição só funciona com coisas que tem um tamanho, "
            "que são null, string, html, array, record e ranges"
        )
        .at(op_source)
        .maybe(kind == "range", lambda error: error.because(_RANGE_NOT_ITERABLE))
    )


def _float_order(left: float, right: float) -> int:
    if math.isnan(left) or math.isnan(right):
        return _sign(not math.isnan(left), not math.isnan(right))
    return _sign(left, right)


def _record_members_message(side: str, record: Record) -> str:
    members = record.summarize_members()
    if not members:
        return f"o valor a {side} é um record, e não tem nenhum membro"
    return f"o valor a {side} é um record, e tem os seguintes membros: {members}"


def compare(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> int:
    """Order two values: negative, zero or positive. NaN sorts before every float."""
    left_kind, right_kind = type_name(left), type_name(right)
    if left_kind == "null" or right_kind == "null":
        return _sign(left_kind != "null", right_kind != "null")
    if left_kind in _NUMERIC and right_kind in _NUMERIC:
        if "float" in (left_kind, right_kind):
            return _float_order(float(left), float(right))
        return _sign(int(left), int(right))
    if left_kind == right_kind == "string":
        return _sign(left, right)
    if left_kind == right_kind == "html":
        return _sign(left.text, right.text)
    if left_kind == right_kind == "array":
        for position, (x, y) in enumerate(zip(list(left), list(right))):
            try:
                order = compare(x, y, left_source, op_source, right_source)
            except TemplateRuntimeError as error:
                error.because(
                    f"esse erro ocorreu quando o valor na posição {position} "
                    "dos arrays estavam sendo comparados"
                )
                raise
            if order:
                return order
        return _sign(len(left), len(right))
    if left_kind == right_kind == "record":
        if left.keys() == right.keys():
            for (key, x), (_, y) in zip(list(left), list(right)):
                try:
                    order = compare(x, y, left_source, op_source, right_source)
                except TemplateRuntimeError as error:
                    error.because(
                        f"esse erro ocorreu quando o valor do membro {display(key)} "
                        "dos records estavam sendo comparados"
                    )
                    raise
                if order:
                    return order
            return 0
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.CANNOT_COMPARE)
            .at(op_source)
            .because(
                "apenas é possível comparar records quando eles tem "
                "os mesmos itens na mesma ordem"
            )
            .because(_record_members_message("esquerda", left))
            .with_value(left)
            .at(left_source)
            .because(_record_members_message("direita", right))
            .with_value(right)
            .at(right_source)
        )
    error = TemplateRuntimeError.from_kind(ErrorKind.CANNOT_COMPARE).at(op_source)
    if left_kind == right_kind == "range":
        error.because("não é possível comparar ranges")
    elif left_kind == right_kind == "function":
        error.because("não é possível comparar funções")
    raise (
        error.because_left_type(left)
        .at(left_source)
        .because_right_type(right)
        .at(right_source)
    )


def concat(left: Any, right: Any, op_source: Optional[Any] = None) -> Any:
    """The ``&`` operator: html if either side is html, otherwise a string."""
    if isinstance(left, Html):
        return Html(left.text + to_html(right))
    if isinstance(right, Html):
        return Html(to_html(left) + right.text)
    try:
        return into_string(left) + into_string(right)
    except TemplateRuntimeError as error:
        error.because(
            "foi necessário converter em string por causa do operador de concatenação"
        ).at(op_source)
        raise


def _arith(left: Any, right: Any, op: Callable[[Any, Any], Any]) -> Any:
    left_kind, right_kind = type_name(left), type_name(right)
    if left_kind not in _NUMERIC or right_kind not in _NUMERIC:
        return _NOT_NUMERIC
    if "float" in (left_kind, right_kind):
        return op(float(left), float(right))
    return _wrap(op(int(left), int(right)))


def _arith_error(
    kind: ErrorKind,
    left: Any,
    right: Any,
    left_source: Any,
    op_source: Any,
    right_source: Any,
    hint: bool = False,
) -> TemplateRuntimeError:
    textual = isinstance(left, (str, Html)) or isinstance(right, (str, Html))
    return (
        TemplateRuntimeError.from_kind(kind)
        .maybe(hint and textual, lambda error: error.because(_CONCAT_HINT))
        .at(op_source)
        .because_left_type(left)
        .at(left_source)
        .because_right_type(right)
        .at(right_source)
    )


def add(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> Any:
    """Add numbers, or join two arrays into a new one."""
    result = _arith(left, right, operator.add)
    if result is not _NOT_NUMERIC:
        return result
    if isinstance(left, list) and isinstance(right, list):
        return [*left, *right]
    raise _arith_error(
        ErrorKind.CANNOT_ADD, left, right, left_source, op_source, right_source, hint=True
    )


def subtract(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> Any:
    result = _arith(left, right, operator.sub)
    if result is not _NOT_NUMERIC:
        return result
    raise _arith_error(
        ErrorKind.CANNOT_SUBTRACT, left, right, left_source, op_source, right_source, hint=True
    )


def multiply(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> Any:
    """Multiply numbers, or repeat an array or string an integer number of times."""
    result = _arith(left, right, operator.mul)
    if result is not _NOT_NUMERIC:
        return result
    left_kind, right_kind = type_name(left), type_name(right)
    if left_kind == "array" and right_kind == "integer":
        return _repeat_array(left, right, right_source)
    if left_kind == "integer" and right_kind == "array":
        return _repeat_array(right, left, left_source)
    if left_kind == "string" and right_kind == "integer":
        return _repeat_string(left, right, right_source)
    if left_kind == "integer" and right_kind == "string":
        return _repeat_string(right, left, right_source)
    raise _arith_error(
        ErrorKind.CANNOT_MULTIPLY, left, right, left_source, op_source, right_source, hint=True
    )


def _repeat_array(items: list, times: int, times_source: Any) -> list:
    if times < 0:
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.CANNOT_REPEAT_ARRAY_NEGATIVE)
            .because("esse número é negativo")
            .with_value(times)
            .at(times_source)
        )
    return list(items) * times


def _repeat_string(text: str, times: int, times_source: Any) -> str:
    if times < 0:
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.CANNOT_REPEAT_STRING_NEGATIVE)
            .because("esse número é negativo")
            .with_value(times)
            .at(times_source)
        )
    return text * times


def _float_div(left: float, right: float) -> float:
    try:
        return left / right
    except ZeroDivisionError:
        if math.isnan(left) or left == 0:
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


def _float_rem(left: float, right: float) -> float:
    try:
        return math.fmod(left, right)
    except ValueError:
        return math.nan


def _saturate(number: float) -> int:
    if math.isnan(number):
        return 0
    if number >= 2.0**63:
        return _I64_MAX
    if number <= -(2.0**63):
        return _I64_MIN
    return int(number)


def _int_div(left: int, right: int) -> int:
    if right == 0:
        raise ZeroDivisionError("divisão inteira por zero")
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return _wrap(quotient)


def _int_rem(left: int, right: int) -> int:
    if right == 0:
        raise ZeroDivisionError("resto de divisão por zero")
    remainder = abs(left) % abs(right)
    return -remainder if left < 0 else remainder


def divide(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> float:
    """Divide numbers; the result is always a float."""
    if type_name(left) in _NUMERIC and type_name(right) in _NUMERIC:
        return _float_div(float(left), float(right))
    raise _arith_error(ErrorKind.CANNOT_DIVIDE, left, right, left_source, op_source, right_source)


def integer_divide(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> int:
    """Divide numbers and truncate the quotient towards zero."""
    left_kind, right_kind = type_name(left), type_name(right)
    if left_kind not in _NUMERIC or right_kind not in _NUMERIC:
        raise _arith_error(
            ErrorKind.CANNOT_DIVIDE, left, right, left_source, op_source, right_source
        )
    left_float, right_float = left_kind == "float", right_kind == "float"
    if not left_float and not right_float:
        return _int_div(int(left), int(right))
    if left_float and right_kind == "boolean":
        return _int_div(_saturate(left), int(right))
    if left_kind == "boolean" and right_float:
        return _int_div(int(left), _saturate(right))
    return _saturate(_float_div(float(left), float(right)))


def remain(
    left: Any,
    right: Any,
    left_source: Optional[Any] = None,
    op_source: Optional[Any] = None,
    right_source: Optional[Any] = None,
) -> Any:
    """The remainder of a truncating division; it takes the sign of the left side."""
    left_kind, right_kind = type_name(left), type_name(right)
    if left_kind not in _NUMERIC or right_kind not in _NUMERIC:
        raise _arith_error(
            ErrorKind.CANNOT_REMAIN, left, right, left_source, op_source, right_source
        )
    if "float" in (left_kind, right_kind):
        return _float_rem(float(left), float(right))
    return _int_rem(int(left), int(right))
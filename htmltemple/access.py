"""Method calls, member access and indexing on template values."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, Optional

from .errors import ErrorKind, TemplateRuntimeError
from .values import RangeExclusiveOpen, Record, display, type_name

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U32_MAX = 2**32 - 1
_MAX_PRECISION = 18
_DEFAULT_PRECISION = 2


def _wrap(number: int) -> int:
    return (number - _I64_MIN) % 2**64 + _I64_MIN


def _saturate(number: float) -> int:
    if math.isnan(number):
        return 0
    if number >= 2.0**63:
        return _I64_MAX
    if number <= -(2.0**63):
        return _I64_MIN
    return int(number)


def _ratio(total: float, count: int) -> float:
    if count == 0:
        return math.nan
    return total / count


def _bad_arguments(name: str, value_source: Any) -> TemplateRuntimeError:
    return TemplateRuntimeError(f"argumentos inválidos para o método {name}").at(value_source)


def _summand(item: Any, name: str, value_source: Any) -> Any:
    kind = type_name(item)
    if kind == "null":
        return 0
    if kind == "boolean":
        return 1 if item else 0
    if kind in ("integer", "float"):
        return item
    raise (
        TemplateRuntimeError(
            f"o método {name} só funciona com arrays de null, boolean, integer e float"
        )
        .at(value_source)
        .because_type(item)
    )


def _sum(items: list, name: str, value_source: Any) -> Any:
    items = list(items)
    total: Any = 0
    floating = False
    for item in items:
        term = _summand(item, name, value_source)
        if isinstance(term, float) and not floating:
            floating = True
            total = float(total)
        total = total + term if floating else _wrap(total + term)
    if name == "avg":
        return _ratio(float(total), len(items))
    return total


def _precision(args: list, name: str, value_source: Any) -> int:
    if not args:
        return _DEFAULT_PRECISION
    if len(args) != 1 or type_name(args[0]) != "integer":
        raise _bad_arguments(name, value_source)
    precision = args[0]
    if not 0 <= precision <= _MAX_PRECISION:
        raise _bad_arguments(name, value_source)
    return precision


def method(
    value: Any,
    name: str,
    args: Sequence[Any] = (),
    value_source: Optional[Any] = None,
) -> Any:
    """Call a built-in method: ``sum`` and ``avg`` on arrays, ``decimal`` on numbers."""
    args = list(args)
    kind = type_name(value)
    if kind == "array" and name in ("sum", "avg"):
        if args:
            raise _bad_arguments(name, value_source)
        return _sum(value, name, value_source)
    if kind == "integer" and name == "decimal":
        return format_decimal_int(value, _precision(args, name, value_source))
    if kind == "float" and name == "decimal":
        return format_decimal_float(value, _precision(args, name, value_source))
    raise TemplateRuntimeError.from_kind(ErrorKind.METHOD_DOES_NOT_EXIST, name).because_type(
        value
    )


def member(value: Any, name: str, value_source: Optional[Any] = None) -> Any:
    """Read the member ``name`` of a record (``record.name``)."""
    if not isinstance(value, Record):
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_RECORD)
            .because(
                "foi esperado um record porque a sintaxe de acesso de membro foi usada "
                "(record.membro), se você queria era chamar um método, adicione "
                "parentêsis depois do membro (valor.metodo())"
            )
            .with_value(value)
            .at(value_source)
        )
    if name in value:
        return value.get(name)
    members = value.summarize_members()
    if members:
        reason = (
            f"o membro {display(name)} não existe nesse record, "
            f"ele tem os seguintes membros: {members}"
        )
    else:
        reason = f"o membro {display(name)} não existe nesse record, ele não tem nenhum membro"
    raise (
        TemplateRuntimeError.from_kind(ErrorKind.UNDEFINED_MEMBER)
        .because(reason)
        .with_value(value)
        .at(value_source)
    )


def _source_at(sources: Sequence[Any], position: int) -> Any:
    return sources[position] if position < len(sources) else None


def _is_full_range(index_value: Any) -> bool:
    return isinstance(index_value, RangeExclusiveOpen) and index_value.start is None


def _unsupported_index(
    index_value: Any, index_source: Any, container: Any, container_source: Any
) -> TemplateRuntimeError:
    return (
        TemplateRuntimeError.from_kind(ErrorKind.OUT_OF_BOUNDS)
        .with_value(index_value)
        .at(index_source)
        .because(f"esse índice não pode ser usado em um {type_name(container)}")
        .at(container_source)
        .with_value(container)
    )


def _out_of_bounds(
    index_value: Any, index_source: Any, reason: str, container: Any, container_source: Any
) -> TemplateRuntimeError:
    return (
        TemplateRuntimeError.from_kind(ErrorKind.OUT_OF_BOUNDS)
        .with_value(index_value)
        .at(index_source)
        .because(reason)
        .at(container_source)
        .with_value(container)
    )


def index(
    value: Any,
    indexes: Sequence[Any],
    value_source: Optional[Any] = None,
    index_sources: Sequence[Any] = (),
) -> Any:
    """Index a string, array or record with one or more indexes (``value[a, b]``).

    ``index_sources`` holds the source of each index, in order.
    """
    indexes = list(indexes)
    sources = tuple(index_sources or ())
    if type_name(value) not in ("string", "array", "record"):
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_INDEXABLE)
            .with_value(value)
            .at(value_source)
        )
    return _index_container(value, value_source, indexes, sources, 0)


def _index_value(
    value: Any, value_source: Any, indexes: list, sources: Sequence[Any], offset: int
) -> Any:
    if not indexes:
        return value
    if type_name(value) not in ("string", "array", "record"):
        raise (
            TemplateRuntimeError.from_kind(ErrorKind.EXPECTED_INDEXABLE)
            .with_value(value)
            .at(value_source)
        )
    return _index_container(value, value_source, indexes, sources, offset)


def _index_container(
    value: Any, value_source: Any, indexes: list, sources: Sequence[Any], offset: int
) -> Any:
    kind = type_name(value)
    if kind == "string":
        return _index_string(value, value_source, indexes, sources, offset)
    if kind == "array":
        return _index_array(value, value_source, indexes, sources, offset)
    return _index_record(value, value_source, indexes, sources, offset)


def _byte_slice(encoded: bytes, position: int) -> Optional[str]:
    if not 0 <= position <= _U32_MAX or position + 1 > len(encoded):
        return None
    try:
        return encoded[position : position + 1].decode("utf-8")
    except UnicodeDecodeError:
        return None


def _index_string(
    text: str, text_source: Any, indexes: list, sources: Sequence[Any], offset: int
) -> str:
    if not indexes:
        return text
    first = indexes[0]
    if len(indexes) == 1:
        if type_name(first) == "integer":
            encoded = text.encode("utf-8")
            position = first if first >= 0 else first + len(encoded)
            piece = _byte_slice(encoded, position)
            if piece is not None:
                return piece
            raise _out_of_bounds(
                position,
                _source_at(sources, offset),
                "essa posição não existe nesta string",
                text,
                text_source,
            )
        if _is_full_range(first):
            return text
        raise _unsupported_index(first, _source_at(sources, offset), text, text_source)
    raise _unsupported_index(indexes[1], _source_at(sources, offset + 1), text, text_source)


def _index_array(
    items: list, items_source: Any, indexes: list, sources: Sequence[Any], offset: int
) -> Any:
    if not indexes:
        return items
    first, rest = indexes[0], indexes[1:]
    if type_name(first) == "integer":
        position = first if first >= 0 else first + len(items)
        if 0 <= position < len(items):
            return _index_value(items[position], items_source, rest, sources, offset + 1)
        raise _out_of_bounds(
            position,
            _source_at(sources, offset),
            "essa posição não existe neste array",
            items,
            items_source,
        )
    if _is_full_range(first):
        copied = list(items)
        for position, item in enumerate(copied):
            try:
                copied[position] = _index_value(item, items_source, rest, sources, offset + 1)
            except TemplateRuntimeError as error:
                error.because(f"erro ocorreu enquanto o item [{position}] estava sendo indexado")
                raise
        return copied
    raise _unsupported_index(first, _source_at(sources, offset), items, items_source)


def _index_record(
    record: Record, record_source: Any, indexes: list, sources: Sequence[Any], offset: int
) -> Any:
    if not indexes:
        return record
    first, rest = indexes[0], indexes[1:]
    first_kind = type_name(first)
    if first_kind == "integer":
        position = first if first >= 0 else first + len(record)
        if 0 <= position < len(record):
            item = record.entries[position][1]
            return _index_value(item, record_source, rest, sources, offset + 1)
        raise _out_of_bounds(
            position,
            _source_at(sources, offset),
            "essa posição não existe neste array",
            record,
            record_source,
        )
    if first_kind == "string":
        if first in record:
            return _index_value(record.get(first), record_source, rest, sources, offset + 1)
        raise _out_of_bounds(
            first,
            _source_at(sources, offset),
            "essa posição não existe neste array",
            record,
            record_source,
        )
    if _is_full_range(first):
        entries = []
        for key, item in list(record.entries):
            try:
                entries.append(
                    (key, _index_value(item, record_source, rest, sources, offset + 1))
                )
            except TemplateRuntimeError as error:
                error.because(
                    f"erro ocorreu enquanto o membro [{display(key)}] estava sendo indexado"
                )
                raise
        return Record(entries)
    raise _unsupported_index(first, _source_at(sources, offset), record, record_source)


def _group_thousands(text: str) -> str:
    """Insert a dot every three characters, counting from the right."""
    groups = []
    remaining = text
    while len(remaining) > 3:
        groups.append(remaining[-3:])
        remaining = remaining[:-3]
    groups.append(remaining)
    return ".".join(reversed(groups))


def format_decimal_int(value: int, precision: int) -> str:
    """Format an integer with dots between thousands and ``precision`` zero decimals."""
    grouped = _group_thousands(str(abs(value)))
    if value < 0:
        grouped = "-" + grouped
    if precision == 0:
        return grouped
    return grouped + "," + "0" * precision


def format_decimal_float(value: float, precision: int) -> str:
    """Format a float rounded to ``precision`` decimals, with a comma as decimal mark.

    Without a decimal part (precision zero, infinities, NaN) the value is
    truncated to an integer and formatted as one.
    """
    text = format(value, f".{precision}f")
    if "." not in text:
        return format_decimal_int(_saturate(value), precision)
    int_part, dec_part = text.split(".", 1)
    return _group_thousands(int_part) + "," + dec_part
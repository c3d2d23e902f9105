import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from htmltemple.errors import ErrorKind, TemplateRuntimeError
from htmltemple.ops import (
    add,
    compare,
    concat,
    divide,
    for_each,
    for_each_enumerated,
    integer_divide,
    into_html,
    into_string,
    is_null,
    measure,
    multiply,
    negate,
    ptr_eq,
    range_integer,
    remain,
    spread_args,
    spread_array,
    spread_record,
    subtract,
    to_bool,
    to_html,
)
from htmltemple.values import (
    Html,
    RangeExclusiveClosed,
    RangeExclusiveOpen,
    RangeInclusive,
    Record,
)

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
small_ints = st.integers(min_value=-10**6, max_value=10**6)


def descriptions(error):
    return [entry.description for entry in error.entries]


def test_is_null():
    assert is_null(None) is True
    assert is_null(0) is False
    assert is_null(False) is False


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, False),
        (False, False),
        (0, False),
        (5, True),
        (0.0, False),
        ("", False),
        ("a", True),
        (Html(""), False),
        (Html("x"), True),
        ([], False),
        ([0], True),
        (Record(), False),
        (Record([("a", None)]), True),
        (RangeExclusiveOpen(None), True),
        (RangeExclusiveClosed(3, 3), False),
        (RangeExclusiveClosed(None, I64_MIN), False),
        (RangeExclusiveClosed(None, 0), True),
        (RangeInclusive(3, 3), True),
        (RangeInclusive(4, 3), False),
        (RangeInclusive(None, I64_MIN), True),
        (len, True),
    ],
)
def test_to_bool(value, expected):
    assert to_bool(value) is expected


def test_to_html_escapes_strings():
    assert to_html("<a&b>") == "&lt;a&amp;b&gt;"


def test_to_html_keeps_quotes():
    text = "\"x'"
    assert to_html(text) == text


def test_to_html_concatenates_containers():
    assert to_html([1, "a", Html("<b>")]) == "1a<b>"
    assert to_html(Record([("k", "v"), ("n", 2)])) == "v2"


@pytest.mark.parametrize("value", [None, True, False, RangeInclusive(1, 2), len])
def test_to_html_renders_nothing(value):
    assert to_html(value) == ""


def test_into_string_rejects_html():
    with pytest.raises(TemplateRuntimeError) as info:
        into_string(Html("x"))
    assert info.value.kind is ErrorKind.CANNOT_STRINGIFY_HTML


def test_into_string_rejects_nested_html():
    with pytest.raises(TemplateRuntimeError) as info:
        into_string(["a", [Html("x")]])
    assert info.value.kind is ErrorKind.CANNOT_STRINGIFY_HTML


def test_into_string_joins_values():
    assert into_string(Record([("a", 1), ("b", "x")])) == "1x"
    assert into_string(None) == ""
    assert into_string(True) == ""


def test_into_html():
    markup = Html("<p>")
    assert into_html(markup) is markup
    assert into_html("<") == Html("&lt;")


@pytest.mark.parametrize(
    "value", [RangeExclusiveOpen(1), RangeExclusiveClosed(None, 3), RangeInclusive(None, 7)]
)
def test_for_each_unbounded_range(value):
    with pytest.raises(TemplateRuntimeError) as info:
        for_each(value, lambda i: i, "src")
    error = info.value
    assert error.kind is ErrorKind.EXPECTED_ITERABLE
    assert error.entries[0].value == value
    assert error.entries[0].source == "src"
    assert len(error.entries) == 2


def test_for_each_over_array_and_record():
    assert for_each(["a", "b"], lambda item: item * 2) == ["aa", "bb"]
    assert for_each(Record([("x", 1), ("y", 2)]), lambda item: item) == [1, 2]
    assert for_each(None, lambda item: item) == []


def test_for_each_enumerated():
    assert for_each_enumerated(["a", "b"], lambda i, x: (i, x)) == [(0, "a"), (1, "b")]
    record = Record([("x", 1), ("y", 2)])
    assert for_each_enumerated(record, lambda k, v: (k, v)) == record.entries
    assert for_each_enumerated(None, lambda k, v: v) == []


@pytest.mark.parametrize("value", [True, 3, 1.5, "abc", Html("x"), len])
def test_for_each_enumerated_not_iterable(value):
    with pytest.raises(TemplateRuntimeError) as info:
        for_each_enumerated(value, lambda k, v: v)
    assert info.value.kind is ErrorKind.EXPECTED_ITERABLE
    assert len(info.value.entries) == 1


def test_for_each_enumerated_range_rejected():
    with pytest.raises(TemplateRuntimeError) as info:
        for_each_enumerated(RangeExclusiveClosed(1, 2), lambda k, v: v)
    assert len(info.value.entries) == 2


def test_for_each_body_error_propagates():
    def body(item):
        raise TemplateRuntimeError.from_kind(ErrorKind.UNDEFINED)

    with pytest.raises(TemplateRuntimeError) as info:
        for_each([1], body)
    assert info.value.kind is ErrorKind.UNDEFINED


def test_range_integer():
    assert range_integer(7) == 7
    with pytest.raises(TemplateRuntimeError) as info:
        range_integer(True, "here")
    assert info.value.kind is ErrorKind.EXPECTED_RANGE_INTEGER
    assert info.value.entries[0].source == "here"


def test_spread_args_and_array():
    target = [1]
    spread_args(target, [2, 3])
    assert target == [1, 2, 3]
    spread_array(target, [4])
    assert target == [1, 2, 3, 4]


@pytest.mark.parametrize(
    "spread, message",
    [
        (spread_args, "você só pode mergir arrays nos argumentos de uma função"),
        (spread_array, "você só pode mergir um array com outros arrays"),
    ],
)
def test_spread_list_errors(spread, message):
    with pytest.raises(TemplateRuntimeError) as info:
        spread([], "nope", "src")
    error = info.value
    assert error.kind is ErrorKind.EXPECTED_ARRAY
    assert descriptions(error)[1] == message
    assert error.entries[-1].value == "nope"
    assert error.entries[-1].source == "src"


def test_spread_record_keeps_existing():
    target = Record([("a", 1)])
    spread_record(target, Record([("a", 9), ("b", 2)]))
    assert target.entries == [("a", 1), ("b", 2)]


def test_spread_record_error():
    with pytest.raises(TemplateRuntimeError) as info:
        spread_record(Record(), [1])
    assert info.value.kind is ErrorKind.EXPECTED_RECORD
    assert "você só pode mergir um record com outros records" in descriptions(info.value)


def test_ptr_eq():
    items = [1, 2]
    assert ptr_eq(items, items) is True
    assert ptr_eq(items, list(items)) is False
    record = Record([("a", 1)])
    assert ptr_eq(record, record) is True
    assert ptr_eq(record, Record([("a", 1)])) is False
    assert ptr_eq("x", "x") is True
    assert ptr_eq(1, 1.0) is False


def test_negate():
    assert negate(False) == 0
    assert negate(True) == -1
    assert negate(I64_MIN) == I64_MIN
    assert negate(2.5) == -2.5


def test_negate_error():
    with pytest.raises(TemplateRuntimeError) as info:
        negate("a", "op", "val")
    error = info.value
    assert error.kind is ErrorKind.EXPECTED_NUMBER
    assert error.entries[0].source == "val"
    assert error.entries[1].source == "op"


def test_measure_containers():
    assert measure(None) == 0
    assert measure("héllo") == len("héllo".encode("utf-8"))
    assert measure(Html("<b>")) == len("<b>")
    assert measure([1, 2, 3]) == len([1, 2, 3])
    assert measure(Record([("a", 1)])) == 1


@given(small_ints, small_ints)
def test_measure_ranges(start, end):
    assert measure(RangeExclusiveClosed(start, end)) == len(range(start, end))
    assert measure(RangeInclusive(start, end)) == len(range(start, end + 1))


def test_measure_overflowing_range():
    assert measure(RangeExclusiveClosed(I64_MIN, I64_MAX)) == 0


def test_measure_errors():
    with pytest.raises(TemplateRuntimeError) as info:
        measure(5)
    assert info.value.kind is ErrorKind.EXPECTED_MEASUREABLE
    assert len(info.value.entries) == 2
    with pytest.raises(TemplateRuntimeError) as info:
        measure(RangeExclusiveOpen(None))
    assert len(info.value.entries) == 3


def test_compare_null_first():
    assert compare(None, None) == 0
    assert compare(None, I64_MIN) < 0
    assert compare("a", None) > 0


def test_compare_mixed_numbers():
    assert compare(True, 1) == 0
    assert compare(1, 1.0) == 0
    assert compare(math.nan, -math.inf) < 0
    assert compare(math.nan, math.nan) == 0


@given(st.floats(), st.floats())
def test_compare_antisymmetric(left, right):
    assert compare(left, right) == -compare(right, left)


@given(small_ints, small_ints)
def test_compare_orders_integers(left, right):
    assert (compare(left, right) < 0) == (left < right)
    assert (compare(left, right) == 0) == (left == right)


def test_compare_arrays():
    assert compare([1, 2], [1, 2, 3]) < 0
    assert compare([1, 3], [1, 2, 3]) > 0
    assert compare(["a"], ["a"]) == 0


def test_compare_array_error_mentions_position():
    with pytest.raises(TemplateRuntimeError) as info:
        compare([1, "a"], [1, 2])
    assert info.value.kind is ErrorKind.CANNOT_COMPARE
    assert "posição 1" in descriptions(info.value)[-1]


def test_compare_records():
    assert compare(Record([("a", 1)]), Record([("a", 2)])) < 0
    with pytest.raises(TemplateRuntimeError) as info:
        compare(Record([("a", 1)]), Record())
    texts = descriptions(info.value)
    assert 'o valor a esquerda é um record, e tem os seguintes membros: "a"' in texts
    assert "o valor a direita é um record, e não tem nenhum membro" in texts


def test_compare_ranges_and_mixed():
    with pytest.raises(TemplateRuntimeError) as info:
        compare(RangeInclusive(1, 2), RangeInclusive(1, 2))
    assert "não é possível comparar ranges" in descriptions(info.value)
    with pytest.raises(TemplateRuntimeError) as info:
        compare("a", 1)
    assert descriptions(info.value)[1:] == [
        "o valor a esquerda é um string",
        "o valor a direita é um integer",
    ]


def test_concat():
    assert concat(Html("<b>"), "<") == Html("<b>&lt;")
    assert concat("<", Html("<b>")) == Html("&lt;<b>")
    assert concat("a", 1) == "a1"


def test_concat_error():
    with pytest.raises(TemplateRuntimeError) as info:
        concat(["x", Html("y")], "z", "op")
    assert info.value.entries[-1].source == "op"
    assert descriptions(info.value)[-1] == (
        "foi necessário converter em string por causa do operador de concatenação"
    )


def test_add():
    assert add(I64_MAX, 1) == I64_MIN
    assert add(True, True) == add(1, 1)
    assert isinstance(add(1, 0.5), float)
    assert add([1], [2]) == [1, 2]


def test_add_string_hint():
    with pytest.raises(TemplateRuntimeError) as info:
        add("a", "b")
    assert info.value.kind is ErrorKind.CANNOT_ADD
    assert any("&" in text for text in descriptions(info.value))
    with pytest.raises(TemplateRuntimeError) as info:
        add([1], 1)
    assert len(info.value.entries) == 3


@given(small_ints, small_ints)
def test_add_subtract_inverse(left, right):
    assert subtract(add(left, right), right) == left


def test_subtract_error():
    with pytest.raises(TemplateRuntimeError) as info:
        subtract([1], [1])
    assert info.value.kind is ErrorKind.CANNOT_SUBTRACT


def test_multiply_repeat():
    assert multiply([1, 2], 2) == [1, 2, 1, 2]
    assert multiply(0, [1]) == []
    assert multiply("ab", 2) == "abab"
    assert multiply(0, "ab") == ""


def test_multiply_negative_repeat():
    with pytest.raises(TemplateRuntimeError) as info:
        multiply([1], -1, "l", "op", "r")
    assert info.value.kind is ErrorKind.CANNOT_REPEAT_ARRAY_NEGATIVE
    assert info.value.entries[-1].source == "r"
    with pytest.raises(TemplateRuntimeError) as info:
        multiply(-1, [1], "l", "op", "r")
    assert info.value.entries[-1].source == "l"
    with pytest.raises(TemplateRuntimeError) as info:
        multiply("a", -2)
    assert info.value.kind is ErrorKind.CANNOT_REPEAT_STRING_NEGATIVE


def test_multiply_html_error():
    with pytest.raises(TemplateRuntimeError) as info:
        multiply(Html("x"), 2)
    assert info.value.kind is ErrorKind.CANNOT_MULTIPLY


def test_divide():
    assert divide(7, 2) == 3.5
    assert divide(1, 0) == math.inf
    assert divide(-1, 0.0) == -math.inf
    assert math.isnan(divide(0, 0))
    with pytest.raises(TemplateRuntimeError) as info:
        divide("a", 1)
    assert info.value.kind is ErrorKind.CANNOT_DIVIDE


@given(small_ints, small_ints.filter(lambda n: n != 0))
def test_integer_divide_and_remain_agree(left, right):
    quotient = integer_divide(left, right)
    remainder = remain(left, right)
    assert quotient * right + remainder == left
    assert abs(remainder) < abs(right)
    assert remainder == 0 or (remainder < 0) == (left < 0)


def test_integer_divide_special_cases():
    assert integer_divide(1.0, 0) == I64_MAX
    assert integer_divide(math.nan, 1.0) == 0
    assert integer_divide(I64_MIN, -1) == I64_MIN
    with pytest.raises(ZeroDivisionError):
        integer_divide(1, 0)
    with pytest.raises(ZeroDivisionError):
        integer_divide(True, 0.5)


def test_remain_special_cases():
    assert math.isnan(remain(1.0, 0))
    with pytest.raises(ZeroDivisionError):
        remain(3, False)
    with pytest.raises(TemplateRuntimeError) as info:
        remain([1], 1)
    assert info.value.kind is ErrorKind.CANNOT_REMAIN
# htmltemple

The runtime core of a small HTML template language: the value model, the
language's operators, member and index access, the built-in methods, and
HTML rendering of runtime errors. It has no dependencies outside the
standard library.

## Install

```
pip install htmltemple
```

To run the tests:

```
pip install "htmltemple[test]"
pytest
```

## Values (`htmltemple.values`)

Template values are plain Python values, plus a few extra types:

| Template type | Python                                                          |
|---------------|-----------------------------------------------------------------|
| null          | `None`                                                          |
| boolean       | `bool`                                                          |
| integer       | `int`                                                           |
| float         | `float`                                                         |
| string        | `str`                                                           |
| html          | `Html` (markup written out as it is)                            |
| array         | `list`                                                          |
| record        | `Record` (ordered key/value entries)                            |
| range         | `RangeExclusiveOpen`, `RangeExclusiveClosed`, `RangeInclusive`  |
| function      | any callable                                                    |

- `from_json(data)` turns JSON-like data into template values. Dicts become
  records, lists and tuples become arrays, integers outside the 64-bit signed
  range become floats, and non-finite floats become null.
- `deep_clone(value)` copies arrays and records recursively.
- `display(value, pretty)` formats a value the way diagnostics show it
  (strings quoted, html as `{{...}}`, ranges as `1..3`, `..=7` and so on);
  with `pretty` set, arrays and records are spread over indented lines.
- `values_equal(left, right)` compares structurally without mixing types, so
  `1`, `1.0` and `True` are all different.
- `type_name(value)` gives the type's name in the template language.

`Record` has `insert`, `get` (raises `KeyError` when the key is missing),
`keys`, `summarize_members`, `len()`, iteration over `(key, value)` pairs and
`in`.

```python
from htmltemple.values import from_json, display

data = from_json({"name": "Ana", "tags": ["a", "b"]})
print(display(data, False))   # {"name": "Ana", "tags": ["a", "b"]}
```

## Operators (`htmltemple.ops`)

- Arithmetic: `add`, `subtract`, `multiply`, `divide`, `integer_divide`,
  `remain`. Integer arithmetic wraps around at 64 bits; `divide` always gives a
  float; `integer_divide` truncates towards zero; integer division or
  remainder by zero raises `ZeroDivisionError`. `add` also joins two arrays and
  `multiply` repeats an array or string a non-negative number of times.
- `concat` is the `&` operator: html if either side is html, a string
  otherwise.
- `compare` returns a negative, zero or positive number; null sorts first and
  NaN sorts before every float.
- `negate`, `measure` (strings and html are measured in UTF-8 bytes),
  `ptr_eq`, `is_null`, `to_bool`.
- Conversions: `to_html` (escapes `&`, `<` and `>` in strings), `into_html`,
  `into_string` (html cannot be turned into a string).
- Iteration and spreading: `for_each`, `for_each_enumerated`,
  `range_integer`, `spread_args`, `spread_array`, `spread_record`.

```python
from htmltemple import ops

ops.add(1, 2)            # 3
ops.concat("a", 1)       # "a1"
ops.into_html("<b>")     # Html(text="&lt;b&gt;")
```

## Access and methods (`htmltemple.access`)

- `member(value, name)` reads `record.name`.
- `index(value, indexes)` handles `value[i, j, ...]` on strings, arrays and
  records: integer positions (negative ones count from the end), string keys
  on records, and the full range `..` to apply the remaining indexes to every
  item.
- `method(value, name, args)` runs the built-in methods `sum` and `avg` on
  arrays and `decimal` on numbers (default precision 2, at most 18).
- `format_decimal_int` and `format_decimal_float` write numbers with dots
  between thousands and a comma as decimal mark.

```python
from htmltemple.access import method

method(1234567, "decimal", [], None)   # "1.234.567,00"
```

## Errors (`htmltemple.errors`)

Operations that the language rejects raise `TemplateRuntimeError`. It holds a
list of `ErrorEntry` items: the first states the error, the later ones explain
it, and each may carry a source location and the value involved. The error
kinds are listed in `ErrorKind`. The messages are written in Portuguese.

## Error rendering (`htmltemple.render`)

- `render_runtime_error(error, resolve)` turns a `TemplateRuntimeError` into a
  self-contained HTML block. `resolve` maps each entry's source to a
  `(file, code, (start, end))` span, or `None`; located spans are shown as
  source excerpts with the span underlined, followed by editor links.
- `PathedIoError(path, error)` describes a file that could not be read;
  `to_html(source)` renders it.
- `source_to_html`, `editor_link` and `escape_html` are the building blocks.

## What this package does not do

It does not read, parse or evaluate template files. There is no template
syntax here and no command-line tool: you build values yourself and apply the
operators, access functions and methods to them, and render any errors that
come out.
"""HTML rendering of template errors: escaped source excerpts, editor links and styling."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any, Optional, Union

from .errors import TemplateRuntimeError
from .values import display

SourceSpan = tuple[Any, str, tuple[int, int]]
"""A file, its code and the ``(start, end)`` offsets of a span inside that code."""

_VERBATIM_PREFIX = "\\\\?\\"

_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

STYLE = """<style>
    .html-temple-error {
        font-size: 1rem;
        font-weight: normal;
        * {
            font-size: inherit;
        }
        max-width: max-content;
        display: block;
        border: 1px solid currentColor;
        padding: 0.5em;
        margin: 0;
        font-family: 'Consolas', 'Courier New', Courier, monospace;
        overflow: hidden;
        u {
            text-decoration: underline wavy blue;
            font-weight: bold;
        }
        span {
            white-space: pre;
            display: block;
        }
        code {
            white-space: pre;
        }
        p {
            padding: 0;
            margin: 0;
            span {
                overflow: hidden;
                white-space: nowrap;
                text-overflow: ellipsis;
            }
        }
        div, a {
            display: inline-flex;
            overflow: hidden;
            white-space: nowrap;
            text-overflow: ellipsis;
            max-width: 100%;
            div {
                display: inline-block;
                max-width: min-content;
                flex: 1 0;
            }
        }
    }
</style>"""

_OPENING = '<div class="html-temple-error">'


def escape_html(text: str) -> str:
    """Replace the characters that are special in HTML with their entities."""
    return "".join(_ENTITIES.get(char, char) for char in text)


def _display_path(path: Any) -> str:
    text = os.fspath(path) if not isinstance(path, str) else path
    if isinstance(text, bytes):
        text = os.fsdecode(text)
    while text.startswith(_VERBATIM_PREFIX):
        text = text[len(_VERBATIM_PREFIX):]
    return text


def _describe(error: BaseException) -> str:
    if isinstance(error, FileNotFoundError):
        return "arquivo não encontrado"
    if isinstance(error, PermissionError):
        return "permissão negada"
    if isinstance(error, FileExistsError):
        return "arquivo já existe"
    if isinstance(error, TimeoutError):
        return "time out"
    if isinstance(error, InterruptedError):
        return "interrompido"
    if isinstance(error, NotImplementedError):
        return "não suportado"
    if isinstance(error, EOFError):
        return "fim do arquivo inesperado"
    if isinstance(error, MemoryError):
        return "sem memória"
    if type(error) is OSError and error.errno is None:
        return "outro erro"
    return "erro do sistema operacional"


class PathedIoError(Exception):
    """A failure to read a template file, together with the path involved."""

    def __init__(self, path: Any, error: BaseException) -> None:
        super().__init__(f"{_display_path(path)}: {error}")
        self.path = path
        self.error = error

    def to_html(self, source: Optional[SourceSpan] = None) -> str:
        """Render the error; ``source`` points at the place that asked for the file."""
        parts = [
            _OPENING,
            "<p><b>erro</b>: ",
            _describe(self.error),
            "</p><p>",
            escape_html(_display_path(self.path)),
            "</p><p>",
            escape_html(str(self.error)),
            "</p>",
        ]
        if source is not None:
            file, code, (start, end) = source
            excerpt, (line, column) = source_to_html(code, start, end)
            parts.append(excerpt)
            parts.append(editor_link(file, line, column))
        parts.append(STYLE)
        parts.append("</div>")
        return "".join(parts)


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def source_to_html(code: str, start: int, end: int) -> tuple[str, tuple[int, int]]:
    """Render the lines holding ``code[start:end]`` with that span underlined.

    Returns the markup and the one-based line and column where the span starts.
    """
    line_start = code[:start].count("\n")
    line_end = line_start + code[start:end].count("\n")
    lines = code.split("\n")
    first_line_pos = sum(len(line) + 1 for line in lines[:line_start])
    line_col = (line_start + 1, 1 + start - first_line_pos)

    parts: list[str] = []
    if line_start == line_end:
        line_text = lines[line_start]
        trim = _indent(line_text)
        local_start, local_end = start - first_line_pos, end - first_line_pos
        parts.append(f"<span><b>{line_start + 1} | </b>")
        parts.append(escape_html(line_text[trim:local_start]))
        parts.append("<u>")
        parts.append(escape_html(line_text[local_start:local_end]))
        parts.append("</u>")
        parts.append(escape_html(line_text[local_end:]))
        parts.append("</span>")
        return "".join(parts), line_col

    padding = len(str(line_end + 1))
    shown = lines[line_start:line_end + 1]
    trim = min((_indent(line) for line in shown), default=0)
    for line_number, line_text in enumerate(shown, start=line_start):
        label = str(line_number + 1).rjust(padding)
        if line_number == line_start:
            local_start = start - first_line_pos
            parts.append(f"<span><b>{label} | </b>")
            parts.append(escape_html(line_text[trim:local_start]))
            parts.append("<u>")
            parts.append(escape_html(line_text[local_start:]))
            parts.append("</u></span>")
        elif line_number < line_end:
            parts.append(f"<span><b>{label} | </b><u>")
            parts.append(escape_html(line_text[trim:]))
            parts.append("</u></span>")
        else:
            local_end = end - first_line_pos
            parts.append(f"<span><b>{label} | </b><u>")
            parts.append(escape_html(line_text[trim:local_end]))
            parts.append("</u>")
            parts.append(escape_html(line_text[local_end:]))
            parts.append("</span>")
        first_line_pos += len(line_text) + 1
    return "".join(parts), line_col


def editor_link(filename: Any, line: int, column: int) -> str:
    """A link that opens ``filename`` at the given line and column in the editor."""
    name = escape_html(_display_path(filename))
    return f'<a href="vscode://file/{name}:{line}:{column}">{name}:{line}</a>'


def render_runtime_error(
    error: Union[TemplateRuntimeError, PathedIoError],
    resolve: Optional[Callable[[Any], Optional[SourceSpan]]] = None,
) -> str:
    """Render a runtime error with its explanations, excerpts and editor links.

    ``resolve`` maps the source of each entry to the file and span it covers,
    or to ``None`` when it cannot be located.
    """
    if isinstance(error, PathedIoError):
        return error.to_html(None)

    parts = [_OPENING]
    links: dict[Any, tuple[int, int]] = {}
    for position, entry in enumerate(error.entries):
        parts.append("<p><b>erro</b>: " if position == 0 else "<hr><p><b>info</b>: ")
        parts.append(entry.description)
        parts.append("</p>")
        located = resolve(entry.source) if resolve is not None else None
        if located is not None:
            file, code, (start, end) = located
            excerpt, line_col = source_to_html(code, start, end)
            parts.append(excerpt)
            links[file] = min(links[file], line_col) if file in links else line_col
        if entry.has_value:
            parts.append("<p><b>valor</b>: <code>")
            parts.append(escape_html(display(entry.value, pretty=True)))
            parts.append("</code></p>")
        parts.append("</p>")
    for file, (line, column) in links.items():
        parts.append(editor_link(file, line, column))
    parts.append(STYLE)
    parts.append("</div>")
    return "".join(parts)
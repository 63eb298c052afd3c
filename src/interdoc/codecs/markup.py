"""Interdoc markup: a line-oriented word-processing format with full fidelity.

Grammar::

    document  := header ("\\n" paragraph)* ["\\n"]
    header    := "%IDOC 1"
    paragraph := "[" style "]" run*
    run       := "{" flags "|" text "}"
    flags     := ["b"] ["i"] ["u"]
    text      := (char | "\\\\" | "\\{" | "\\}" | "\\n" | "\\r" | "\\u" hex4)*

``\\u`` only carries lone surrogates, which UTF-8 cannot encode.

Every run is written out, including empty runs and neighbours with the same
formatting, so ``import_document(export_document(d)) == d`` for any Document.
"""

from __future__ import annotations

from interdoc.codecs.base import Codec, decode_text
from interdoc.document.models import Document, Paragraph, ParagraphStyle, Run
from interdoc.errors import MalformedInputError

HEADER = "%IDOC 1"

_ESCAPE = {"\\": "\\\\", "{": "\\{", "}": "\\}", "\n": "\\n", "\r": "\\r"}
_UNESCAPE = {"\\": "\\", "{": "{", "}": "}", "n": "\n", "r": "\r"}
_FLAG_ORDER = "biu"


def _escape_char(ch: str) -> str:
    if "\ud800" <= ch <= "\udfff":
        return f"\\u{ord(ch):04x}"
    return _ESCAPE.get(ch, ch)


def _format_run(run: Run) -> str:
    flags = ("b" if run.bold else "") + ("i" if run.italic else "") + ("u" if run.underline else "")
    return "{" + flags + "|" + "".join(_escape_char(ch) for ch in run.text) + "}"


def _parse_flags(flags: str, line_no: int, column: int) -> tuple[bool, bool, bool]:
    # Flags must appear at most once each, in b-i-u order.
    position = 0
    for ch in flags:
        found = _FLAG_ORDER.find(ch, position)
        if found == -1:
            raise MalformedInputError(f"Invalid run flags {flags!r}", line=line_no, column=column)
        position = found + 1
    return ("b" in flags, "i" in flags, "u" in flags)


def _parse_paragraph(line: str, line_no: int) -> Paragraph:
    if not line.startswith("["):
        raise MalformedInputError("Paragraph must start with a [style] tag", line=line_no, column=1)
    close = line.find("]")
    if close == -1:
        raise MalformedInputError("Unterminated style tag", line=line_no, column=1)
    style_name = line[1:close]
    try:
        style = ParagraphStyle(style_name)
    except ValueError:
        raise MalformedInputError(f"Unknown paragraph style {style_name!r}", line=line_no, column=2) from None

    runs: list[Run] = []
    pos = close + 1
    n = len(line)
    while pos < n:
        if line[pos] != "{":
            raise MalformedInputError("Expected '{' to start a run", line=line_no, column=pos + 1)
        bar = line.find("|", pos + 1)
        if bar == -1:
            raise MalformedInputError("Run is missing its '|' separator", line=line_no, column=pos + 1)
        bold, italic, underline = _parse_flags(line[pos + 1:bar], line_no, pos + 2)

        text: list[str] = []
        i = bar + 1
        while True:
            if i >= n:
                raise MalformedInputError("Unterminated run", line=line_no, column=pos + 1)
            ch = line[i]
            if ch == "}":
                break
            if ch == "\\" and line[i + 1:i + 2] == "u":
                code = line[i + 2:i + 6]
                if len(code) != 4 or not all(c in "0123456789abcdefABCDEF" for c in code):
                    raise MalformedInputError("Invalid \\u escape", line=line_no, column=i + 1)
                text.append(chr(int(code, 16)))
                i += 6
            elif ch == "\\":
                if i + 1 >= n or line[i + 1] not in _UNESCAPE:
                    raise MalformedInputError("Invalid escape sequence", line=line_no, column=i + 1)
                text.append(_UNESCAPE[line[i + 1]])
                i += 2
            elif ch == "{":
                raise MalformedInputError("Unescaped '{' inside run", line=line_no, column=i + 1)
            else:
                text.append(ch)
                i += 1
        runs.append(Run("".join(text), bold, italic, underline))
        pos = i + 1

    return Paragraph(tuple(runs), style)


class MarkupCodec(Codec):
    """Lossless codec; the reference format for round-trip checks."""

    name = "markup"
    extensions = frozenset({"idoc"})
    canonical_extension = "idoc"
    full_fidelity = True

    def import_document(self, data: bytes) -> Document:
        text = decode_text(data, "utf-8")
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        # Tolerate CRLF files; a real CR inside text is always escaped.
        lines = [line[:-1] if line.endswith("\r") else line for line in lines]

        if not lines or lines[0] != HEADER:
            raise MalformedInputError(f"Missing {HEADER!r} header", line=1)

        return Document(
            tuple(_parse_paragraph(line, line_no) for line_no, line in enumerate(lines[1:], start=2))
        )

    def export_document(self, document: Document) -> bytes:
        lines = [HEADER]
        for paragraph in document.iter_blocks():
            lines.append(f"[{paragraph.style.value}]" + "".join(_format_run(r) for r in paragraph.runs))
        return ("\n".join(lines) + "\n").encode("utf-8")

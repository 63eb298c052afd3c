"""Rich Text Format codec.

Reads the character and paragraph formatting the document model can hold and
skips every other destination (font and colour tables, pictures, document
info). Writes plain 7-bit RTF with ``\\uN?`` escapes for anything outside ASCII.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from interdoc.codecs.base import Codec, RunBuilder, normalize_newlines, normalize_runs
from interdoc.document.models import Document, Paragraph, ParagraphStyle
from interdoc.errors import MalformedInputError

if TYPE_CHECKING:
    from interdoc.config.models import InterdocConfig

_TOKEN_RE = re.compile(
    r"""
      \\(?P<word>[a-zA-Z]{1,32})(?P<arg>-?\d{1,10})?\ ?
    | \\'(?P<hex>[0-9a-fA-F]{2})
    | \\(?P<symbol>[^a-zA-Z])
    | (?P<open>\{)
    | (?P<close>\})
    | (?P<newline>[\r\n]+)
    | (?P<text>[^\\{}\r\n]+)
    | (?P<dangling>\\)
    """,
    re.VERBOSE,
)

# Groups whose content is never document text.
_DESTINATIONS = frozenset({
    "author", "bkmkend", "bkmkstart", "colorschememapping", "colortbl", "comment",
    "company", "creatim", "datastore", "doccomm", "falt", "fldinst", "filetbl",
    "fonttbl", "footer", "footerf", "footerl", "footerr", "footnote", "generator",
    "header", "headerf", "headerl", "headerr", "info", "keywords", "latentstyles",
    "listoverridetable", "listtable", "listtext", "mmathPr", "nonshppict", "object",
    "operator", "pict", "pntext", "pntxta", "pntxtb", "printim", "revtbl", "revtim",
    "rsidtbl", "shppict", "stylesheet", "subject", "themedata", "title", "xmlnstbl",
})

_SPECIAL_CHARS = {
    "line": "\n",
    "tab": "\t",
    "emdash": "\u2014",
    "endash": "\u2013",
    "bullet": "\u2022",
    "lquote": "\u2018",
    "rquote": "\u2019",
    "ldblquote": "\u201c",
    "rdblquote": "\u201d",
    "emspace": "\u2003",
    "enspace": "\u2002",
}

_SYMBOLS = {"\\": "\\", "{": "{", "}": "}", "~": "\xa0", "_": "\u2011"}

_UNDERLINE_ON = frozenset({"ul", "uld", "uldash", "uldb", "ulhwave", "ulth", "ulw", "ulwave"})

_HEADING_SCALE = {0: 1.0, 1: 2.0, 2: 1.6, 3: 1.35, 4: 1.15, 5: 1.0, 6: 0.9}


@dataclass(frozen=True)
class _GroupState:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    skip: bool = False
    uc: int = 1


class _RtfReader:
    def __init__(self, source: str, codepage: int) -> None:
        self.source = source
        self.codepage = codepage
        self.paragraphs: list[Paragraph] = []
        self.runs = RunBuilder()
        self.style = ParagraphStyle.normal
        self.state = _GroupState()
        self.stack: list[_GroupState] = []
        self.to_skip = 0
        self.high_surrogate: str | None = None

    def error(self, message: str, pos: int) -> MalformedInputError:
        line = self.source.count("\n", 0, pos) + 1
        column = pos - (self.source.rfind("\n", 0, pos) + 1) + 1
        return MalformedInputError(message, line=line, column=column)

    def read(self) -> Document:
        started = False
        for m in _TOKEN_RE.finditer(self.source):
            # A parameter is the last group of a control word, so test the word itself.
            kind = "word" if m.group("word") is not None else m.lastgroup
            if started and not self.stack and kind not in ("newline", "text"):
                raise self.error("Content after the end of the document", m.start())
            if kind == "open":
                self.stack.append(self.state)
                started = True
            elif kind == "close":
                if not self.stack:
                    raise self.error("Unbalanced '}'", m.start())
                self._flush_surrogate()
                self.state = self.stack.pop()
                self.to_skip = 0
            elif not self.stack:
                if kind == "text" and not m.group("text").isspace():
                    raise self.error("Text outside the document group", m.start())
            elif kind == "word":
                self._control_word(m.group("word"), m.group("arg"), m.start())
            elif kind == "hex":
                self._hex(m.group("hex"))
            elif kind == "symbol":
                self._symbol(m.group("symbol"), m.start())
            elif kind == "text":
                self._text(m.group("text"))
            elif kind == "dangling":
                raise self.error("Dangling backslash", m.start())

        if self.stack:
            raise self.error("Unterminated group (truncated input?)", len(self.source))
        if self.runs:
            self._end_paragraph()
        return Document(tuple(self.paragraphs))

    def _control_word(self, word: str, arg: str | None, pos: int) -> None:
        value = int(arg) if arg is not None else None

        if word in _DESTINATIONS:
            self.state = replace(self.state, skip=True)
            return
        if word == "uc":
            self.state = replace(self.state, uc=max(0, value or 0))
            return
        if word == "ansicpg" and value:
            try:
                codecs.lookup(f"cp{value}")
            except LookupError:
                raise self.error(f"Unknown code page {value}", pos) from None
            self.codepage = value
            return
        if self.state.skip:
            return

        if word == "par":
            self._end_paragraph()
        elif word == "pard":
            self.style = ParagraphStyle.normal
        elif word == "outlinelevel":
            level = (value or 0) + 1
            self.style = ParagraphStyle.heading(level) if 1 <= level <= 6 else ParagraphStyle.normal
        elif word == "plain":
            self.state = replace(self.state, bold=False, italic=False, underline=False)
        elif word == "b":
            self.state = replace(self.state, bold=value != 0)
        elif word == "i":
            self.state = replace(self.state, italic=value != 0)
        elif word in _UNDERLINE_ON:
            self.state = replace(self.state, underline=value != 0)
        elif word == "ulnone":
            self.state = replace(self.state, underline=False)
        elif word == "u" and value is not None:
            if not -32768 <= value <= 0xFFFF:
                raise self.error(f"Unicode escape out of range: \\u{value}", pos)
            self._unicode(value + 65536 if value < 0 else value)
            self.to_skip = self.state.uc
        elif word in _SPECIAL_CHARS:
            self._emit(_SPECIAL_CHARS[word])

    def _symbol(self, symbol: str, pos: int) -> None:
        if symbol == "*":
            self.state = replace(self.state, skip=True)
        elif symbol == "'":
            raise self.error("Invalid \\' hex escape", pos)
        elif symbol in ("\n", "\r"):
            if not self.state.skip:
                self._end_paragraph()
        elif symbol in _SYMBOLS:
            self._emit(_SYMBOLS[symbol])

    def _hex(self, digits: str) -> None:
        if self.to_skip:
            self.to_skip -= 1
            return
        self._emit(bytes([int(digits, 16)]).decode(f"cp{self.codepage}", errors="replace"))

    def _text(self, text: str) -> None:
        if self.to_skip:
            dropped = min(self.to_skip, len(text))
            text = text[dropped:]
            self.to_skip -= dropped
        if any(ord(ch) > 0x7F for ch in text):
            text = text.encode("latin-1").decode(f"cp{self.codepage}", errors="replace")
        self._emit(text)

    def _unicode(self, code: int) -> None:
        if 0xD800 <= code <= 0xDBFF:
            self._flush_surrogate()
            self.high_surrogate = chr(code)
            return
        if 0xDC00 <= code <= 0xDFFF and self.high_surrogate is not None:
            high = ord(self.high_surrogate)
            self.high_surrogate = None
            self._emit(chr(0x10000 + ((high - 0xD800) << 10) + (code - 0xDC00)))
            return
        self._emit(chr(code))

    def _emit(self, text: str) -> None:
        if self.state.skip or not text:
            return
        if self.high_surrogate is not None:
            text = self.high_surrogate + text
            self.high_surrogate = None
        self.runs.add(text, self.state.bold, self.state.italic, self.state.underline)

    def _flush_surrogate(self) -> None:
        """Emit a high surrogate that no low surrogate followed."""
        if self.high_surrogate is not None:
            pending, self.high_surrogate = self.high_surrogate, None
            self._emit(pending)

    def _end_paragraph(self) -> None:
        self._flush_surrogate()
        self.paragraphs.append(Paragraph(self.runs.take(), self.style))


def _escape(text: str) -> str:
    out: list[str] = []
    for ch in normalize_newlines(text):
        code = ord(ch)
        if ch in "\\{}":
            out.append("\\" + ch)
        elif ch == "\n":
            out.append("\\line ")
        elif ch == "\t":
            out.append("\\tab ")
        elif 0x20 <= code < 0x7F:
            out.append(ch)
        elif code > 0xFFFF:
            code -= 0x10000
            out.append(f"\\u{_signed(0xD800 + (code >> 10))}?\\u{_signed(0xDC00 + (code & 0x3FF))}?")
        else:
            out.append(f"\\u{_signed(code)}?")
    return "".join(out)


def _signed(code: int) -> int:
    return code - 65536 if code > 32767 else code


class RtfCodec(Codec):
    """RTF reader and writer for paragraphs, outline-level headings and emphasis."""

    name = "rtf"
    extensions = frozenset({"rtf"})
    canonical_extension = "rtf"

    def __init__(self, font: str = "Calibri", font_size: int = 11, codepage: int = 1252) -> None:
        self.font = font
        self.font_size = font_size
        self.codepage = codepage

    @classmethod
    def from_config(cls, config: InterdocConfig) -> RtfCodec:
        return cls(font=config.rtf.font, font_size=config.rtf.font_size, codepage=config.rtf.codepage)

    def import_document(self, data: bytes) -> Document:
        # RTF is 7-bit; stray 8-bit bytes are re-decoded with the document code page.
        source = data.decode("latin-1")
        if not source.lstrip().startswith("{\\rtf"):
            raise MalformedInputError("Missing {\\rtf header", offset=0)
        return _RtfReader(source, self.codepage).read()

    def export_document(self, document: Document) -> bytes:
        font = _escape(self.font).replace(";", "")
        lines = [
            f"{{\\rtf1\\ansi\\ansicpg{self.codepage}\\deff0",
            f"{{\\fonttbl{{\\f0\\fswiss {font};}}}}",
            "\\viewkind4\\uc1",
        ]
        for paragraph in document.iter_blocks():
            level = paragraph.style.heading_level
            size = round(self.font_size * 2 * _HEADING_SCALE[level])
            head = "\\pard\\plain"
            if level:
                head += f"\\outlinelevel{level - 1}"
            head += f"\\f0\\fs{size}"
            body = []
            for run in normalize_runs(paragraph.runs):
                flags = ("\\b" if run.bold else "") + ("\\i" if run.italic else "") + ("\\ul" if run.underline else "")
                if flags:
                    flags += " "
                body.append("{" + flags + _escape(run.text) + "}")
            lines.append(head + "".join(body) + "\\par")
        lines.append("}")
        return ("\n".join(lines) + "\n").encode("ascii")

"""HTML codec.

Strict mode (the default) tokenizes the markup itself and rejects anything it
cannot close cleanly: unterminated tags and comments, stray or mismatched end
tags, and elements left open at the end of input. Lenient mode hands the markup
to BeautifulSoup and imports whatever tree it repairs. The strict tokenizer
exists only because BeautifulSoup never rejects input.

Both modes feed the same builder. Literal whitespace is collapsed to one space
and trimmed at paragraph edges, the way a browser renders it; character
references are kept verbatim. The exporter writes every space the importer
would collapse as ``&#32;`` so that export, import, export is stable.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from interdoc.codecs.base import Codec, RunBuilder, decode_text, normalize_runs
from interdoc.document.models import Document, Paragraph, ParagraphStyle, Run
from interdoc.errors import MalformedInputError

if TYPE_CHECKING:
    from interdoc.config.models import InterdocConfig

_VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})
_RAW_TEXT_ELEMENTS = frozenset({"script", "style"})
_IGNORED_ELEMENTS = frozenset({"head", "title", "script", "style", "template"})
# May be left open at the end of input.
_OPTIONAL_END = frozenset({"html", "head", "body"})

_PARAGRAPH_TAGS: dict[str, ParagraphStyle] = {"p": ParagraphStyle.normal}
_PARAGRAPH_TAGS.update({f"h{n}": ParagraphStyle.heading(n) for n in range(1, 7)})

_BOLD_TAGS = frozenset({"b", "strong"})
_ITALIC_TAGS = frozenset({"i", "em"})
_UNDERLINE_TAGS = frozenset({"u", "ins"})

# Elements that end an implicit paragraph (text found outside <p>/<hN>).
_BLOCK_BOUNDARIES = frozenset({
    "address", "article", "aside", "blockquote", "body", "caption", "dd",
    "details", "dialog", "div", "dl", "dt", "fieldset", "figcaption", "figure",
    "footer", "form", "header", "hr", "html", "li", "main", "nav", "ol", "pre",
    "section", "summary", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_START_TAG_RE = re.compile(
    r"""<([a-zA-Z][a-zA-Z0-9:-]*)"""
    r"""((?:\s+[^\s"'<>/=]+(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'=<>`]+))?)*)"""
    r"""\s*(/?)>"""
)
_END_TAG_RE = re.compile(r"</([a-zA-Z][a-zA-Z0-9:-]*)\s*>")
_WHITESPACE_RE = re.compile(r"([ \t\n\f\r]+)")

_START, _END, _TEXT = "start", "end", "text"

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#9;",
    "\r": "&#13;",
    "\f": "&#12;",
    "\n": "<br>",
}


def _malformed(message: str, source: str, pos: int) -> MalformedInputError:
    line = source.count("\n", 0, pos) + 1
    column = pos - (source.rfind("\n", 0, pos) + 1) + 1
    return MalformedInputError(message, line=line, column=column)


def _tokenize(source: str) -> Iterator[tuple]:
    """Yield ``(kind, value, pos)`` events; start events carry a self-closing flag."""
    pos = 0
    n = len(source)
    while pos < n:
        lt = source.find("<", pos)
        if lt == -1:
            yield (_TEXT, source[pos:], pos)
            return
        if lt > pos:
            yield (_TEXT, source[pos:lt], pos)
        pos = lt
        nxt = source[lt + 1:lt + 2]

        if source.startswith("<!--", lt):
            end = source.find("-->", lt + 4)
            if end == -1:
                raise _malformed("Unterminated comment", source, lt)
            pos = end + 3
        elif nxt in ("!", "?"):
            end = source.find(">", lt + 2)
            if end == -1:
                raise _malformed("Unterminated markup declaration", source, lt)
            pos = end + 1
        elif nxt == "/":
            m = _END_TAG_RE.match(source, lt)
            if m is None:
                raise _malformed("Unterminated or invalid end tag", source, lt)
            yield (_END, m.group(1).lower(), lt)
            pos = m.end()
        elif nxt.isascii() and nxt.isalpha():
            m = _START_TAG_RE.match(source, lt)
            if m is None:
                raise _malformed("Unterminated or invalid tag", source, lt)
            tag = m.group(1).lower()
            self_closing = bool(m.group(3))
            yield (_START, (tag, self_closing), lt)
            pos = m.end()
            if tag in _RAW_TEXT_ELEMENTS and not self_closing:
                close = re.compile(rf"</{tag}\s*>", re.IGNORECASE).search(source, pos)
                if close is None:
                    raise _malformed(f"Unterminated <{tag}> element", source, lt)
                yield (_END, tag, close.start())
                pos = close.end()
        else:
            yield (_TEXT, "<", lt)
            pos = lt + 1


class _DocumentBuilder:
    """Turns start/end/text events into paragraphs and runs."""

    def __init__(self, strict: bool) -> None:
        self.strict = strict
        self.paragraphs: list[Paragraph] = []
        self._runs = RunBuilder()
        self._style: ParagraphStyle | None = None
        self._explicit = False
        self._has_content = False
        self._pending_space: tuple[bool, bool, bool] | None = None
        self._bold = 0
        self._italic = 0
        self._underline = 0
        self._ignore_depth = 0

    @property
    def _formatting(self) -> tuple[bool, bool, bool]:
        return (self._bold > 0, self._italic > 0, self._underline > 0)

    def start(self, tag: str, on_error=None) -> None:
        if tag == "body":
            # </head> may be omitted; the body is never part of it.
            self._ignore_depth = 0
        if tag in _IGNORED_ELEMENTS and tag not in _VOID_ELEMENTS:
            self._ignore_depth += 1
            return
        if self._ignore_depth:
            return

        if tag in _PARAGRAPH_TAGS:
            if self._explicit and self.strict and on_error is not None:
                raise on_error(f"<{tag}> is not allowed inside a paragraph or heading")
            self._close_paragraph()
            self._style = _PARAGRAPH_TAGS[tag]
            self._explicit = True
        elif tag in _BLOCK_BOUNDARIES:
            if not self._explicit:
                self._close_paragraph()
        elif tag == "br":
            if self._style is not None:
                self._content("\n")
        elif tag in _BOLD_TAGS:
            self._bold += 1
        elif tag in _ITALIC_TAGS:
            self._italic += 1
        elif tag in _UNDERLINE_TAGS:
            self._underline += 1

    def end(self, tag: str) -> None:
        if tag in _IGNORED_ELEMENTS:
            self._ignore_depth = max(0, self._ignore_depth - 1)
            return
        if self._ignore_depth:
            return

        if tag in _PARAGRAPH_TAGS:
            if self._explicit:
                self._close_paragraph()
        elif tag in _BLOCK_BOUNDARIES:
            if not self._explicit:
                self._close_paragraph()
        elif tag in _BOLD_TAGS:
            self._bold = max(0, self._bold - 1)
        elif tag in _ITALIC_TAGS:
            self._italic = max(0, self._italic - 1)
        elif tag in _UNDERLINE_TAGS:
            self._underline = max(0, self._underline - 1)

    def raw_text(self, raw: str) -> None:
        """Source text: whitespace collapses, character references do not."""
        for i, part in enumerate(_WHITESPACE_RE.split(raw)):
            if not part:
                continue
            if i % 2:
                self._space()
            else:
                self._content(html.unescape(part))

    def decoded_text(self, text: str) -> None:
        """Already-decoded text: every whitespace run collapses."""
        for i, part in enumerate(_WHITESPACE_RE.split(text)):
            if not part:
                continue
            if i % 2:
                self._space()
            else:
                self._content(part)

    def finish(self) -> Document:
        self._close_paragraph()
        return Document(tuple(self.paragraphs))

    def _space(self) -> None:
        if self._ignore_depth or not self._has_content:
            return
        if self._pending_space is None:
            self._pending_space = self._formatting

    def _content(self, text: str) -> None:
        if self._ignore_depth or not text:
            return
        if self._style is None:
            self._style = ParagraphStyle.normal
            self._explicit = False
        if self._pending_space is not None:
            self._runs.add(" ", *self._pending_space)
            self._pending_space = None
        self._runs.add(text, *self._formatting)
        self._has_content = True

    def _close_paragraph(self) -> None:
        if self._style is None:
            return
        self.paragraphs.append(Paragraph(self._runs.take(), self._style))
        self._style = None
        self._explicit = False
        self._has_content = False
        self._pending_space = None


def _escape_runs(runs: tuple[Run, ...]) -> str:
    runs = tuple(normalize_runs(runs))
    total = sum(len(run.text) for run in runs)
    index = 0
    prev_literal_space = False
    out: list[str] = []
    for run in runs:
        opening = ("<b>" if run.bold else "") + ("<i>" if run.italic else "") + ("<u>" if run.underline else "")
        closing = ("</u>" if run.underline else "") + ("</i>" if run.italic else "") + ("</b>" if run.bold else "")
        body: list[str] = []
        for ch in run.text:
            if ch == " ":
                # The importer keeps a literal space only between two pieces of content.
                literal = 0 < index < total - 1 and not prev_literal_space
                body.append(" " if literal else "&#32;")
                prev_literal_space = literal
            elif "\ud800" <= ch <= "\udfff":
                # A reference to a lone surrogate reads back as U+FFFD.
                body.append("\ufffd")
                prev_literal_space = False
            else:
                body.append(_ESCAPES.get(ch, ch))
                prev_literal_space = False
            index += 1
        out.append(opening + "".join(body) + closing)
    return "".join(out)


class HtmlCodec(Codec):
    """HTML reader and writer covering paragraphs, headings and inline emphasis."""

    name = "html"
    extensions = frozenset({"html", "htm", "xhtml"})
    canonical_extension = "html"

    def __init__(self, strict: bool = True, encoding: str = "utf-8", title: str | None = None) -> None:
        self.strict = strict
        self.encoding = encoding
        self.title = title

    @classmethod
    def from_config(cls, config: InterdocConfig) -> HtmlCodec:
        return cls(strict=config.html.strict, encoding=config.html.encoding, title=config.html.title)

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_document(self, data: bytes) -> Document:
        source = decode_text(data, self.encoding)
        if self.strict:
            return self._import_strict(source)
        return self._import_lenient(source)

    def _import_strict(self, source: str) -> Document:
        builder = _DocumentBuilder(strict=True)
        stack: list[tuple[str, int]] = []

        for kind, value, pos in _tokenize(source):
            if kind == _TEXT:
                builder.raw_text(value)
            elif kind == _START:
                tag, self_closing = value
                builder.start(tag, on_error=lambda msg, p=pos: _malformed(msg, source, p))
                if tag in _VOID_ELEMENTS:
                    continue
                if self_closing:
                    builder.end(tag)
                else:
                    stack.append((tag, pos))
            else:
                tag = value
                if tag in _VOID_ELEMENTS:
                    continue
                while stack and stack[-1][0] != tag and stack[-1][0] in _OPTIONAL_END:
                    builder.end(stack.pop()[0])
                if not stack:
                    raise _malformed(f"Unexpected end tag </{tag}>", source, pos)
                if stack[-1][0] != tag:
                    raise _malformed(
                        f"Mismatched end tag </{tag}>, expected </{stack[-1][0]}>", source, pos
                    )
                stack.pop()
                builder.end(tag)

        while stack:
            tag, pos = stack.pop()
            if tag not in _OPTIONAL_END:
                raise _malformed(f"Unclosed <{tag}> element", source, pos)
            builder.end(tag)

        return builder.finish()

    def _import_lenient(self, source: str) -> Document:
        soup = BeautifulSoup(source, "html.parser")
        builder = _DocumentBuilder(strict=False)
        self._walk(soup, builder)
        return builder.finish()

    def _walk(self, node: Tag, builder: _DocumentBuilder) -> None:
        for child in node.children:
            if isinstance(child, Tag):
                tag = child.name.lower()
                builder.start(tag)
                if tag not in _VOID_ELEMENTS:
                    self._walk(child, builder)
                    builder.end(tag)
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                builder.decoded_text(str(child))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def render(self, document: Document) -> str:
        """Return the complete HTML text for ``document``."""
        lines = [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            f'<meta charset="{html.escape(self.encoding)}">',
        ]
        if self.title:
            lines.append(f"<title>{html.escape(self.title, quote=False)}</title>")
        lines += ["</head>", "<body>"]
        for paragraph in document.iter_blocks():
            level = paragraph.style.heading_level
            tag = f"h{level}" if level else "p"
            lines.append(f"<{tag}>{_escape_runs(paragraph.runs)}</{tag}>")
        lines += ["</body>", "</html>", ""]
        return "\n".join(lines)

    def export_document(self, document: Document) -> bytes:
        return self.render(document).encode(self.encoding, errors="xmlcharrefreplace")

"""Shared test fixtures for interdoc."""

import pytest

from interdoc.config.models import InterdocConfig
from interdoc.document.models import Document, Paragraph, ParagraphStyle, Run
from interdoc.registry import build_registry


def _doc(*paragraphs):
    return Document(tuple(paragraphs))


# Documents that exercise every construct the model can express.
SAMPLE_DOCUMENTS = {
    "empty": Document(),
    "single_empty_paragraph": _doc(Paragraph()),
    "plain": _doc(Paragraph((Run("Hello"),)), Paragraph((Run("World"),))),
    "mixed_formatting": _doc(
        Paragraph(
            (
                Run("Bold", bold=True),
                Run(" and "),
                Run("italic", italic=True),
                Run(" and "),
                Run("under", underline=True),
                Run("all", bold=True, italic=True, underline=True),
            )
        )
    ),
    "headings": _doc(
        *(
            Paragraph((Run(f"Level {n}"),), ParagraphStyle.heading(n))
            for n in range(1, 7)
        ),
        Paragraph((Run("Body"),)),
    ),
    "unmerged_runs": _doc(
        Paragraph((Run("a"), Run("b"), Run(""), Run("c", bold=True), Run("d", bold=True)))
    ),
    "whitespace": _doc(
        Paragraph((Run("  leading"),)),
        Paragraph((Run("trailing  "),)),
        Paragraph((Run("in  the\tmiddle"),)),
        Paragraph((Run(" "),)),
        Paragraph((Run("a "), Run(" b", bold=True))),
    ),
    "line_breaks": _doc(Paragraph((Run("first\nsecond"), Run("\nthird", italic=True)))),
    "special_chars": _doc(
        Paragraph((Run("<tag> & {braces} \\ back [x] |pipe|"),)),
        Paragraph((Run("café — 日本 \U0001f600"),)),
    ),
    "blank_between": _doc(
        Paragraph((Run("one"),)), Paragraph(), Paragraph((Run("two"),))
    ),
}


# Valid documents holding characters some formats cannot carry unchanged.
LOSSY_DOCUMENTS = {
    "control_chars": _doc(Paragraph((Run("page1\x0cpage2\x01end"),))),
    "lone_surrogate": _doc(
        Paragraph((Run("x\ud800y"),)),
        Paragraph((Run("tail\udfff", bold=True), Run("next"))),
    ),
}

ALL_DOCUMENTS = {**SAMPLE_DOCUMENTS, **LOSSY_DOCUMENTS}


@pytest.fixture(params=sorted(SAMPLE_DOCUMENTS))
def sample_document(request):
    return SAMPLE_DOCUMENTS[request.param]


@pytest.fixture(params=sorted(ALL_DOCUMENTS))
def any_document(request):
    return ALL_DOCUMENTS[request.param]


@pytest.fixture
def config():
    return InterdocConfig()


@pytest.fixture
def registry(config):
    """Builtin codecs only; entry point plugins are not loaded."""
    return build_registry(config, load_plugins=False)

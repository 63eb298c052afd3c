"""Format-neutral document tree shared by every codec."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum


class ParagraphStyle(str, Enum):
    """Descriptive paragraph style tag. No cascading or inheritance."""

    normal = "normal"
    heading1 = "heading1"
    heading2 = "heading2"
    heading3 = "heading3"
    heading4 = "heading4"
    heading5 = "heading5"
    heading6 = "heading6"

    @property
    def heading_level(self) -> int:
        """1-6 for headings, 0 for normal paragraphs."""
        if self is ParagraphStyle.normal:
            return 0
        return int(self.value[-1])

    @classmethod
    def heading(cls, level: int) -> ParagraphStyle:
        if not 1 <= level <= 6:
            raise ValueError(f"heading level must be 1-6, got {level}")
        return cls(f"heading{level}")


@dataclass(frozen=True)
class Run:
    """A piece of text with one set of formatting flags."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError(f"Run.text must be str, got {type(self.text).__name__}")

    @property
    def formatting(self) -> tuple[bool, bool, bool]:
        return (self.bold, self.italic, self.underline)

    def with_text(self, text: str) -> Run:
        return Run(text, self.bold, self.italic, self.underline)


@dataclass(frozen=True)
class Paragraph:
    """Ordered runs plus a style tag."""

    runs: tuple[Run, ...] = ()
    style: ParagraphStyle = ParagraphStyle.normal

    def __post_init__(self) -> None:
        if self.runs is None:
            raise TypeError("Paragraph.runs must be a sequence of Run; use () for none")
        runs = tuple(self.runs)
        for run in runs:
            if not isinstance(run, Run):
                raise TypeError(f"Paragraph.runs items must be Run, got {type(run).__name__}")
        object.__setattr__(self, "runs", runs)
        object.__setattr__(self, "style", ParagraphStyle(self.style))

    def iter_runs(self) -> Iterator[Run]:
        yield from self.runs

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


# Paragraph is the only block variant; tables and images are not modelled.
Block = Paragraph


@dataclass(frozen=True)
class Document:
    """Root of the tree. An empty document is valid."""

    blocks: tuple[Block, ...] = ()

    def __post_init__(self) -> None:
        if self.blocks is None:
            raise TypeError("Document.blocks must be a sequence of blocks; use () for none")
        blocks = tuple(self.blocks)
        for block in blocks:
            if not isinstance(block, Paragraph):
                raise TypeError(f"Document.blocks items must be Paragraph, got {type(block).__name__}")
        object.__setattr__(self, "blocks", blocks)

    @classmethod
    def from_paragraphs(cls, paragraphs: Iterable[Paragraph]) -> Document:
        return cls(tuple(paragraphs))

    def iter_blocks(self) -> Iterator[Block]:
        """Yield blocks in order. Each call starts a fresh traversal."""
        yield from self.blocks

    def iter_runs(self) -> Iterator[Run]:
        """Yield every run of every block, in document order."""
        for block in self.blocks:
            yield from block.iter_runs()

    @property
    def paragraphs(self) -> tuple[Paragraph, ...]:
        return self.blocks

    @property
    def is_empty(self) -> bool:
        return not self.blocks

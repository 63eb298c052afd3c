"""Abstract codec interface and helpers shared by the builtin codecs."""

from __future__ import annotations

import codecs
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, ClassVar

from interdoc.document.models import Document, Run
from interdoc.errors import MalformedInputError

if TYPE_CHECKING:
    from interdoc.config.models import InterdocConfig


class Codec(ABC):
    """Reads and writes one document format.

    Codecs hold only immutable options, so a single instance can serve any
    number of concurrent conversions. ``import_document`` raises
    MalformedInputError for bytes that are not valid in the codec's format.
    ``export_document`` must succeed for every structurally valid Document,
    dropping whatever the format cannot express.
    """

    name: ClassVar[str]
    extensions: ClassVar[frozenset[str]]
    canonical_extension: ClassVar[str]
    full_fidelity: ClassVar[bool] = False

    @classmethod
    def from_config(cls, config: InterdocConfig) -> Codec:
        """Build an instance from the codec's section of the config."""
        return cls()

    def supported_extensions(self) -> frozenset[str]:
        """Lower-case extensions without the leading dot."""
        return self.extensions

    @abstractmethod
    def import_document(self, data: bytes) -> Document:
        """Parse ``data`` into a fresh Document."""
        ...

    @abstractmethod
    def export_document(self, document: Document) -> bytes:
        """Serialize ``document`` to bytes."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def normalize_runs(runs: Iterable[Run]) -> list[Run]:
    """Merge neighbouring runs with equal formatting and drop empty runs."""
    merged: list[Run] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].formatting == run.formatting:
            merged[-1] = merged[-1].with_text(merged[-1].text + run.text)
        else:
            merged.append(run)
    return merged


class RunBuilder:
    """Accumulates text under changing formatting into merged runs."""

    def __init__(self) -> None:
        self._runs: list[Run] = []

    def add(self, text: str, bold: bool = False, italic: bool = False, underline: bool = False) -> None:
        if not text:
            return
        run = Run(text, bold, italic, underline)
        if self._runs and self._runs[-1].formatting == run.formatting:
            self._runs[-1] = self._runs[-1].with_text(self._runs[-1].text + text)
        else:
            self._runs.append(run)

    def take(self) -> tuple[Run, ...]:
        runs = tuple(self._runs)
        self._runs = []
        return runs

    def __bool__(self) -> bool:
        return bool(self._runs)


def decode_text(data: bytes, encoding: str) -> str:
    """Decode ``data``, accepting a UTF-8 byte order mark.

    Undecodable input is reported with the offset of the first bad byte.
    """
    if encoding.replace("_", "-").lower() in ("utf-8", "utf8"):
        encoding = "utf-8-sig"
    try:
        return codecs.decode(data, encoding)
    except UnicodeDecodeError as e:
        raise MalformedInputError(
            f"Input is not valid {e.encoding} text", offset=e.start
        ) from e


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")

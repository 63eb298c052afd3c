"""Codec registry: extension lookup for readers, format lookup for writers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from functools import lru_cache

from interdoc.codecs.base import Codec
from interdoc.codecs.docx import DocxCodec
from interdoc.codecs.html import HtmlCodec
from interdoc.codecs.markup import MarkupCodec
from interdoc.codecs.rtf import RtfCodec
from interdoc.codecs.text import PlainTextCodec
from interdoc.config.models import InterdocConfig
from interdoc.errors import UnsupportedFormatError

logger = logging.getLogger(__name__)


class Format(str, Enum):
    """Target formats a caller can ask for."""

    none = "none"
    docx = "docx"
    markup = "markup"
    html = "html"
    txt = "txt"
    rtf = "rtf"
    pdf = "pdf"


# Target format -> name of the codec that writes it.
FORMAT_CODECS: dict[Format, str] = {
    Format.docx: "docx",
    Format.markup: "markup",
    Format.html: "html",
    Format.txt: "txt",
    Format.rtf: "rtf",
    Format.pdf: "pdf",
}

# Target format -> extension given to converted files.
FORMAT_EXTENSIONS: dict[Format, str] = {
    Format.docx: "docx",
    Format.markup: "idoc",
    Format.html: "html",
    Format.txt: "txt",
    Format.rtf: "rtf",
    Format.pdf: "pdf",
}

# Reader resolution order for the builtin codecs; first match wins.
BUILTIN_CODECS: tuple[type[Codec], ...] = (
    MarkupCodec,
    DocxCodec,
    RtfCodec,
    HtmlCodec,
    PlainTextCodec,
)


class CodecRegistry:
    """Immutable, ordered collection of codec instances.

    Built once and then only read, so it can be shared by concurrent
    conversions without locking.
    """

    def __init__(self, codecs: Iterable[Codec]) -> None:
        codecs = tuple(codecs)
        seen: set[str] = set()
        for codec in codecs:
            if codec.name in seen:
                raise ValueError(f"Duplicate codec name: {codec.name!r}")
            seen.add(codec.name)
        self._codecs = codecs
        self._by_name = {codec.name: codec for codec in codecs}

    @property
    def codecs(self) -> tuple[Codec, ...]:
        return self._codecs

    def get(self, name: str) -> Codec | None:
        return self._by_name.get(name)

    def resolve_reader(self, extension: str) -> Codec:
        """Return the first registered codec that reads ``extension``."""
        ext = extension.lower().lstrip(".")
        for codec in self._codecs:
            if ext in codec.supported_extensions():
                return codec
        raise UnsupportedFormatError(f"File extension '.{ext}' is not supported")

    def resolve_writer(self, target: Format | str) -> tuple[Codec, str]:
        """Return the codec that writes ``target`` and its canonical extension."""
        try:
            fmt = Format(target)
        except ValueError:
            raise UnsupportedFormatError(f"Conversion to '{target}' is not supported") from None

        name = FORMAT_CODECS.get(fmt)
        if name is None:
            raise UnsupportedFormatError(f"Conversion to '{fmt.value}' is not supported")
        codec = self._by_name.get(name)
        if codec is None:
            raise UnsupportedFormatError(
                f"No codec is registered for target format '{fmt.value}'"
            )
        return codec, FORMAT_EXTENSIONS[fmt]

    def readable_extensions(self) -> list[str]:
        seen: list[str] = []
        for codec in self._codecs:
            for ext in sorted(codec.supported_extensions()):
                if ext not in seen:
                    seen.append(ext)
        return seen

    def writable_formats(self) -> list[Format]:
        return [fmt for fmt, name in FORMAT_CODECS.items() if name in self._by_name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"CodecRegistry({[c.name for c in self._codecs]})"


def build_registry(config: InterdocConfig | None = None, *, load_plugins: bool = True) -> CodecRegistry:
    """Builtin codecs in fixed order, followed by entry point plugins."""
    from interdoc.plugins.loader import CodecPluginLoader

    config = config or InterdocConfig()
    codecs: list[Codec] = [cls.from_config(config) for cls in BUILTIN_CODECS]

    if load_plugins and config.plugins.enabled:
        taken = {codec.name for codec in codecs}
        for codec in CodecPluginLoader(config).load_all():
            if codec.name in taken:
                logger.warning("Codec plugin %r shadows a registered codec; skipping", codec.name)
                continue
            taken.add(codec.name)
            codecs.append(codec)

    registry = CodecRegistry(codecs)
    logger.debug("Codec registry ready: %r", registry)
    return registry


@lru_cache(maxsize=1)
def default_registry() -> CodecRegistry:
    """Process-wide registry built from default config on first use."""
    return build_registry()

"""Conversion orchestrator: pick codecs by extension and target, import, export, rename."""

from __future__ import annotations

import logging

from interdoc.codecs.base import Codec
from interdoc.converter.models import (
    ConversionRequest,
    ConversionResult,
    ConversionStage,
)
from interdoc.document.models import Document
from interdoc.errors import (
    ConversionError,
    ErrorKind,
    InterdocError,
    InvalidFilenameError,
)
from interdoc.registry.registry import CodecRegistry, Format, default_registry

logger = logging.getLogger(__name__)


def split_extension(file_name: str) -> tuple[str, str]:
    """Split ``file_name`` at its last dot into (stem, extension).

    Raises InvalidFilenameError when there is no dot or the dot is the last
    character.
    """
    if not isinstance(file_name, str) or not file_name:
        raise InvalidFilenameError("File name is missing")
    dot = file_name.rfind(".")
    if dot == -1 or dot == len(file_name) - 1:
        raise InvalidFilenameError(f"File name '{file_name}' should contain an extension")
    return file_name[:dot], file_name[dot + 1:]


def _is_none_target(target: Format | str) -> bool:
    return target is Format.none or target == Format.none.value


class DocumentConverter:
    """Runs conversions against one codec registry.

    Holds no per-call state; each call builds and drops its own Document, so
    a single instance can be shared across threads.
    """

    def __init__(self, registry: CodecRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> CodecRegistry:
        if self._registry is None:
            self._registry = default_registry()
        return self._registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def convert(self, file_name: str, data: bytes, target: Format | str) -> ConversionResult:
        """Convert ``data`` (named ``file_name``) to ``target``. Never raises."""
        return self.run(ConversionRequest(file_name=file_name, data=data, target=target))

    def run(self, request: ConversionRequest) -> ConversionResult:
        stage = ConversionStage.validating
        logger.debug("Converting %r to %s", request.file_name, request.target)
        try:
            if _is_none_target(request.target):
                logger.debug("Target format is none; nothing to do")
                return ConversionResult.skipped("target format is none")

            stem, extension = split_extension(request.file_name)

            stage = ConversionStage.reading
            reader = self.registry.resolve_reader(extension)
            writer, new_extension = self.registry.resolve_writer(request.target)

            if type(reader) is type(writer):
                logger.info("Skipping %s: already in %s format", request.file_name, reader.name)
                return ConversionResult.skipped(
                    f"source and target share the '{reader.name}' codec"
                )

            stage = ConversionStage.converting
            document = self._import(reader, request.data)
            output = self._export(writer, document)

            stage = ConversionStage.writing
            new_name = f"{stem}.{new_extension}"
            logger.info(
                "Converted %s -> %s (%d paragraphs, %d bytes)",
                request.file_name, new_name, len(document.blocks), len(output),
            )
            return ConversionResult.converted(new_name, output)

        except InterdocError as e:
            if e.kind is ErrorKind.conversion_error:
                logger.warning("Conversion of %s failed", request.file_name, exc_info=True)
            else:
                logger.warning("Conversion of %s failed: %s", request.file_name, e)
            return ConversionResult.failed(e.kind, str(e), stage)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _import(reader: Codec, data: bytes) -> Document:
        try:
            return reader.import_document(bytes(data))
        except InterdocError:
            raise
        except Exception as e:
            raise ConversionError(reader.name, "import", e) from e

    @staticmethod
    def _export(writer: Codec, document: Document) -> bytes:
        try:
            return writer.export_document(document)
        except InterdocError:
            raise
        except Exception as e:
            raise ConversionError(writer.name, "export", e) from e


def convert(
    file_name: str,
    data: bytes,
    target: Format | str,
    registry: CodecRegistry | None = None,
) -> ConversionResult:
    """Convert with the process-wide registry unless one is given."""
    return DocumentConverter(registry).convert(file_name, data, target)

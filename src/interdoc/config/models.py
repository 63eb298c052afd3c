import codecs
from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _check_encoding(v: str) -> str:
    try:
        codecs.lookup(v)
    except LookupError as e:
        raise ValueError(f"unknown text encoding: {v!r}") from e
    return v


class TextCodecConfig(BaseModel):
    encoding: str = "utf-8"
    line_ending: Literal["lf", "crlf"] = "lf"

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        return _check_encoding(v)


class HtmlCodecConfig(BaseModel):
    strict: bool = True
    encoding: str = "utf-8"
    title: str | None = None

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        return _check_encoding(v)


class RtfCodecConfig(BaseModel):
    font: str = Field(default="Calibri", min_length=1)
    font_size: int = Field(default=11, gt=0, le=400)
    codepage: int = Field(default=1252, gt=0)

    @field_validator("codepage")
    @classmethod
    def validate_codepage(cls, v: int) -> int:
        _check_encoding(f"cp{v}")
        return v


class PdfCodecConfig(BaseModel):
    page_size: Literal["a4", "letter"] = "a4"
    margin: float = Field(default=56.0, ge=0)
    font_size: float = Field(default=11.0, gt=0)


class PluginsConfig(BaseModel):
    enabled: bool = True
    disabled: list[str] = Field(default_factory=list)
    required: list[str] = Field(default_factory=list)


class InterdocConfig(BaseModel):
    text: TextCodecConfig = Field(default_factory=TextCodecConfig)
    html: HtmlCodecConfig = Field(default_factory=HtmlCodecConfig)
    rtf: RtfCodecConfig = Field(default_factory=RtfCodecConfig)
    pdf: PdfCodecConfig = Field(default_factory=PdfCodecConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

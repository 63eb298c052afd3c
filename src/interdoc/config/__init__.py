from .loader import load_config
from .models import (
    HtmlCodecConfig,
    InterdocConfig,
    PdfCodecConfig,
    PluginsConfig,
    RtfCodecConfig,
    TextCodecConfig,
)

__all__ = [
    "HtmlCodecConfig",
    "InterdocConfig",
    "PdfCodecConfig",
    "PluginsConfig",
    "RtfCodecConfig",
    "TextCodecConfig",
    "load_config",
]

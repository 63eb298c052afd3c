"""Entry point discovery for extra codecs."""

from interdoc.plugins.loader import CodecPluginLoader

__all__ = ["CodecPluginLoader"]

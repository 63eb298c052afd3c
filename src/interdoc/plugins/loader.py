"""Codec discovery and loading via entry points."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING

from interdoc.codecs.base import Codec
from interdoc.errors import CodecPluginError

if TYPE_CHECKING:
    from interdoc.config.models import InterdocConfig

logger = logging.getLogger(__name__)


class CodecPluginLoader:
    """Discovers codecs registered under the ``interdoc.codecs`` group."""

    GROUP = "interdoc.codecs"

    def __init__(self, config: InterdocConfig):
        self._config = config

    def discover(self) -> list[str]:
        """Names of every registered codec entry point."""
        return [ep.name for ep in importlib.metadata.entry_points(group=self.GROUP)]

    def _instantiate(self, name: str, plugin: object) -> Codec:
        if not (isinstance(plugin, type) and issubclass(plugin, Codec)):
            raise TypeError(f"entry point '{name}' does not name a Codec subclass")
        return plugin.from_config(self._config)

    def load(self, name: str) -> Codec:
        """Load one named plugin. Raises CodecPluginError on any failure."""
        for ep in importlib.metadata.entry_points(group=self.GROUP):
            if ep.name == name:
                try:
                    return self._instantiate(name, ep.load())
                except Exception as e:
                    raise CodecPluginError(name, str(e)) from e
        raise CodecPluginError(name, "no such entry point")

    def load_all(self) -> list[Codec]:
        """Load every enabled plugin in discovery order.

        Plugins that fail to load are skipped with a warning unless they are
        listed in ``plugins.required``.
        """
        plugins = self._config.plugins
        loaded: list[Codec] = []
        found: set[str] = set()

        for ep in importlib.metadata.entry_points(group=self.GROUP):
            found.add(ep.name)
            if ep.name in plugins.disabled:
                logger.debug("Codec plugin %r disabled by config", ep.name)
                continue
            try:
                codec = self._instantiate(ep.name, ep.load())
            except Exception as e:
                if ep.name in plugins.required:
                    raise CodecPluginError(ep.name, str(e)) from e
                logger.warning("Codec plugin %r unavailable: %s", ep.name, e)
                continue
            loaded.append(codec)

        missing = [name for name in plugins.required if name not in found]
        if missing:
            raise CodecPluginError(missing[0], "no such entry point")
        return loaded

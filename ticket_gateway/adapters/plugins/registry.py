"""
Plugin Registry em memória.

Representa os plugins instalados no helpdesk. O gateway só
precisa saber se um plugin está registrado e ativo:

- "subticket": relationship store (InMemoryRelationshipStore)
- "markdown-support": suporte a notas em Markdown (StaticPlugin)
"""

import logging
from typing import Dict, Optional

from ticket_gateway.core.shared.interfaces import Plugin

logger = logging.getLogger(__name__)


class StaticPlugin:
    """
    Plugin sem comportamento próprio, apenas com estado ativo/inativo.

    Example:
        registry.register("markdown-support", StaticPlugin(active=True))
    """

    def __init__(self, active: bool = True):
        self._active = active

    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        self._active = active


class InMemoryPluginRegistry:
    """
    Registro de plugins em memória.

    Example:
        registry = InMemoryPluginRegistry()
        registry.register("subticket", InMemoryRelationshipStore(store))
        registry.get_plugin("subticket")
    """

    def __init__(self, plugins: Optional[Dict[str, Plugin]] = None):
        self._plugins: Dict[str, Plugin] = dict(plugins or {})

    def register(self, name: str, plugin: Plugin) -> None:
        logger.debug(f"Plugin registrado: {name}")
        self._plugins[name] = plugin

    def unregister(self, name: str) -> None:
        self._plugins.pop(name, None)

    def get_plugin(self, name: str) -> Optional[Plugin]:
        return self._plugins.get(name)

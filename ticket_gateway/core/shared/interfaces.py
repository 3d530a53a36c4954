"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces transversais que os Adapters devem
implementar. São os "Ports" da Arquitetura Hexagonal.

Ports definidos aqui:
- EventPublisher: publicação de Domain Events
- Plugin / PluginRegistry: sondagem de capacidades externas
  (relationship store de subtickets, suporte a Markdown)

Princípio: Core define interfaces; Adapters implementam.
O fluxo de dependência sempre aponta para o Core.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .events import DomainEvent


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Example:
        class LoggingEventPublisher(EventPublisher):
            def publish(self, event):
                logger.info(event.to_dict())
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Publica evento para consumidores.

        Args:
            event: Evento de domínio a ser publicado
        """
        raise NotImplementedError

    @abstractmethod
    def publish_batch(self, events: List[DomainEvent]) -> None:
        """
        Publica múltiplos eventos em batch.

        Args:
            events: Lista de eventos a serem publicados
        """
        raise NotImplementedError


@runtime_checkable
class Plugin(Protocol):
    """
    Capacidade externa instalada no helpdesk.

    Um plugin presente mas inativo é tratado exatamente como
    um plugin ausente.
    """

    def is_active(self) -> bool:
        ...


class PluginRegistry(Protocol):
    """
    Registro de plugins instalados.

    Implementações:
    - InMemoryPluginRegistry (testes e desenvolvimento)
    """

    def get_plugin(self, name: str) -> Optional[Plugin]:
        """
        Busca plugin pelo nome.

        Args:
            name: Nome de registro (ex: "subticket")

        Returns:
            Plugin registrado ou None
        """
        ...


def active_plugin(registry: Optional[PluginRegistry], name: str) -> Optional[Plugin]:
    """
    Retorna o plugin somente se estiver presente e ativo.

    Args:
        registry: Registro de plugins (pode ser None)
        name: Nome do plugin

    Returns:
        Plugin ativo ou None
    """
    if registry is None:
        return None
    plugin = registry.get_plugin(name)
    if plugin is None:
        return None
    is_active = getattr(plugin, "is_active", None)
    if not callable(is_active) or not is_active():
        return None
    return plugin

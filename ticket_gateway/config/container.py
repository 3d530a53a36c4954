"""
Dependency Injection Container.

Configura e gerencia todas as dependências do gateway.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (stores, registry,
  checker, resolver, query engine, publisher)
- Factory: Nova instância por chamada (use cases, relationship
  manager: o handle do plugin é obtido uma vez por requisição)
- Configuration: valores de ``settings.as_dict()``
"""

from typing import Any, Optional

from dependency_injector import containers, providers

from ticket_gateway.adapters.events import InMemoryEventPublisher, LoggingEventPublisher
from ticket_gateway.adapters.plugins import InMemoryPluginRegistry
from ticket_gateway.core.access import PermissionChecker
from ticket_gateway.core.subtickets import (
    InMemoryRelationshipStore,
    RelationshipManager,
    SubticketService,
)
from ticket_gateway.core.tickets import (
    CreateTicketService,
    DeleteTicketService,
    EntityResolver,
    GetTicketService,
    InMemoryDirectory,
    InMemoryTicketStore,
    ListStatusesService,
    QueryEngine,
    SearchTicketsService,
    TicketStatsService,
    UpdateTicketService,
)

from . import settings


def build_plugin_registry(relationship_store, subticket_plugin_name: str) -> InMemoryPluginRegistry:
    """Registro com o relationship store registrado sob o nome configurado."""
    registry = InMemoryPluginRegistry()
    registry.register(subticket_plugin_name, relationship_store)
    return registry


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: Variáveis de ambiente/settings
    - Infrastructure: Stores, plugins, publisher
    - Core services: Checker, resolver, query engine
    - Use Cases: Um Factory por operação

    Example:
        container = get_container()
        service = container.get_ticket_service()
        detail = service.execute(credential, "680285")
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure (Singleton - uma instância por app)
    # =========================================================================

    ticket_store = providers.Singleton(InMemoryTicketStore)

    directory = providers.Singleton(InMemoryDirectory)

    event_publisher = providers.Singleton(LoggingEventPublisher)

    relationship_store = providers.Singleton(
        InMemoryRelationshipStore,
        ticket_store=ticket_store,
    )

    plugin_registry = providers.Singleton(
        build_plugin_registry,
        relationship_store=relationship_store,
        subticket_plugin_name=config.subticket_plugin_name,
    )

    # =========================================================================
    # Core services (sem estado)
    # =========================================================================

    permission_checker = providers.Singleton(PermissionChecker)

    entity_resolver = providers.Singleton(
        EntityResolver,
        directory=directory,
        ticket_store=ticket_store,
        plugin_registry=plugin_registry,
        markdown_plugin_name=config.markdown_plugin_name,
    )

    query_engine = providers.Singleton(
        QueryEngine,
        ticket_store=ticket_store,
        directory=directory,
        resolver=entity_resolver,
    )

    # =========================================================================
    # Use Cases (Factory - nova instância por chamada)
    # =========================================================================

    get_ticket_service = providers.Factory(
        GetTicketService,
        checker=permission_checker,
        resolver=entity_resolver,
        ticket_store=ticket_store,
        directory=directory,
    )

    update_ticket_service = providers.Factory(
        UpdateTicketService,
        checker=permission_checker,
        resolver=entity_resolver,
        ticket_store=ticket_store,
        event_publisher=event_publisher,
        default_note_title=config.default_note_title,
        default_note_format=config.default_note_format,
        require_markdown_plugin=config.require_markdown_plugin,
    )

    create_ticket_service = providers.Factory(
        CreateTicketService,
        checker=permission_checker,
        resolver=entity_resolver,
        ticket_store=ticket_store,
        directory=directory,
        event_publisher=event_publisher,
        require_markdown_plugin=config.require_markdown_plugin,
    )

    delete_ticket_service = providers.Factory(
        DeleteTicketService,
        checker=permission_checker,
        resolver=entity_resolver,
        ticket_store=ticket_store,
        event_publisher=event_publisher,
    )

    search_tickets_service = providers.Factory(
        SearchTicketsService,
        checker=permission_checker,
        query_engine=query_engine,
        default_limit=config.search_default_limit,
        max_limit=config.search_max_limit,
    )

    ticket_stats_service = providers.Factory(
        TicketStatsService,
        checker=permission_checker,
        query_engine=query_engine,
    )

    list_statuses_service = providers.Factory(
        ListStatusesService,
        checker=permission_checker,
        directory=directory,
    )

    # Subtickets (manager por requisição)
    relationship_manager = providers.Factory(
        RelationshipManager,
        checker=permission_checker,
        resolver=entity_resolver,
        plugin_registry=plugin_registry,
        event_publisher=event_publisher,
        plugin_name=config.subticket_plugin_name,
    )

    subticket_service = providers.Factory(
        SubticketService,
        manager=relationship_manager,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria e configura se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(settings.as_dict())

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(Container):
    """
    Container para testes.

    Mesmo grafo do Container; ``build_testing_container`` troca o
    publisher por um em memória para inspecionar eventos publicados.

    Example:
        container = build_testing_container(require_markdown_plugin=True)
        container.directory().add_department(Department(id=1, name="Support"))
        publisher = container.event_publisher()
    """


def build_testing_container(**overrides: Any) -> TestingContainer:
    """
    Cria TestingContainer configurado.

    Args:
        **overrides: Chaves de ``settings.as_dict()`` a sobrescrever
    """
    container = TestingContainer()
    container.config.from_dict({**settings.as_dict(), **overrides})
    container.event_publisher.override(providers.Singleton(InMemoryEventPublisher))
    return container

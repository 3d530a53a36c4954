"""
Configurações globais do Pytest para o Ticket Gateway.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures compartilhadas: dados de referência, stores em
memória, registro de plugins e credenciais.
"""

from datetime import datetime
from pathlib import Path

import pytest

from ticket_gateway.adapters.events import InMemoryEventPublisher
from ticket_gateway.adapters.plugins import InMemoryPluginRegistry, StaticPlugin
from ticket_gateway.config.container import reset_container
from ticket_gateway.core.access import Credential, Permission, PermissionChecker
from ticket_gateway.core.subtickets import InMemoryRelationshipStore
from ticket_gateway.core.tickets import (
    Department,
    EntityResolver,
    HelpTopic,
    InMemoryDirectory,
    InMemoryTicketStore,
    Priority,
    QueryEngine,
    Sla,
    Staff,
    Team,
    Ticket,
    TicketStatus,
)


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset do container global entre testes.

    Garante que cada teste inicia com estado limpo.
    """
    yield
    reset_container()


def pytest_configure(config):
    """Configuração do pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that exercise several domains together"
    )


# =============================================================================
# Dados de referência
# =============================================================================

@pytest.fixture
def directory():
    """
    Directory em memória com uma árvore de departamentos:

        Development (1)
        └── osTicket (2)
        Support (3)
        └── Hardware (4)
        Archive (5, inativo)
        osTicket (6, raiz homônima)
    """
    return InMemoryDirectory(
        departments=[
            Department(id=1, name="Development"),
            Department(id=2, name="osTicket", parent_id=1),
            Department(id=3, name="Support"),
            Department(id=4, name="Hardware", parent_id=3),
            Department(id=5, name="Archive", is_active=False),
            Department(id=6, name="osTicket"),
        ],
        topics=[
            HelpTopic(id=1, name="General Inquiry"),
            HelpTopic(id=2, name="Legacy", is_active=False),
        ],
        statuses=[
            TicketStatus(id=1, name="Open", state="open", sort=1),
            TicketStatus(id=2, name="Resolved", state="closed", sort=3),
            TicketStatus(id=3, name="Closed", state="closed", sort=2),
        ],
        slas=[
            Sla(id=1, name="Default SLA"),
            Sla(id=2, name="Old SLA", is_active=False),
        ],
        staff=[
            Staff(id=1, username="jdoe", name="John Doe", email="john@example.com"),
            Staff(id=2, username="asmith", name="Alice Smith", email="alice@example.com"),
            Staff(id=3, username="ghost", name="Ghost User", is_active=False),
        ],
        teams=[Team(id=1, name="Level 1")],
        priorities=[Priority(id=2, name="Normal")],
    )


@pytest.fixture
def ticket_store():
    """Ticket store em memória (vazio)."""
    return InMemoryTicketStore()


@pytest.fixture
def make_ticket(ticket_store):
    """
    Factory de tickets já registrados no store.

    Example:
        ticket = make_ticket(100, subject="Parent Ticket")
        ticket.number  # "ABC100"
    """

    def _make(ticket_id, **fields):
        fields.setdefault("number", f"ABC{ticket_id}")
        fields.setdefault("subject", f"Ticket {ticket_id}")
        fields.setdefault("status_id", 1)
        fields.setdefault("dept_id", 1)
        fields.setdefault("created", datetime(2025, 1, 1, 12, 0, 0))
        fields.setdefault("updated", fields["created"])
        return ticket_store.add(Ticket(id=ticket_id, **fields))

    return _make


# =============================================================================
# Plugins e eventos
# =============================================================================

@pytest.fixture
def relationship_store(ticket_store):
    return InMemoryRelationshipStore(ticket_store)


@pytest.fixture
def plugin_registry(relationship_store):
    """Registro com plugin de subtickets ativo e sem plugin de Markdown."""
    registry = InMemoryPluginRegistry()
    registry.register("subticket", relationship_store)
    return registry


@pytest.fixture
def markdown_plugin(plugin_registry):
    """Registra plugin de Markdown ativo."""
    plugin = StaticPlugin(active=True)
    plugin_registry.register("markdown-support", plugin)
    return plugin


@pytest.fixture
def event_publisher():
    return InMemoryEventPublisher()


# =============================================================================
# Serviços do core
# =============================================================================

@pytest.fixture
def checker():
    return PermissionChecker()


@pytest.fixture
def resolver(directory, ticket_store, plugin_registry):
    return EntityResolver(directory, ticket_store, plugin_registry)


@pytest.fixture
def query_engine(ticket_store, directory, resolver):
    return QueryEngine(ticket_store, directory, resolver)


# =============================================================================
# Credenciais
# =============================================================================

@pytest.fixture
def admin_credential():
    """Credencial com todas as permissões."""
    return Credential.with_permissions(*Permission, key_id="admin-key")


@pytest.fixture
def read_only_credential():
    return Credential.with_permissions(Permission.READ_TICKETS, key_id="read-key")


@pytest.fixture
def no_permission_credential():
    return Credential(key_id="empty-key")

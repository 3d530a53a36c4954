"""
Domínio de Tickets - Consulta e alteração de tickets do helpdesk.

Este módulo contém a lógica do gateway sobre o ticket store externo:
- Entidades (Ticket, Department, TicketStatus, ...)
- Ports (TicketStore, Directory) e implementações em memória
- EntityResolver (ID / nome / caminho → ID verificado)
- QueryEngine (busca e estatísticas)
- Use Cases (Get, Update, Create, Delete, Search, Stats, Statuses)
- Domain Events (TicketCreated, TicketUpdated, TicketDeleted)
"""

from .entities import (
    Department,
    HelpTopic,
    MessageFormat,
    Priority,
    Sla,
    SortField,
    Staff,
    Team,
    ThreadEntry,
    Ticket,
    TicketStatus,
)
from .events import TicketCreatedEvent, TicketDeletedEvent, TicketUpdatedEvent
from .dtos import (
    CreateTicketInputDTO,
    PaginatedSearchResultDTO,
    SearchCriteria,
    StatsSnapshot,
    TicketDetailDTO,
    TicketSearchItemDTO,
    TicketStatusDTO,
    TicketSummaryDTO,
    UpdateTicketInputDTO,
    UpdateTicketResultDTO,
)
from .ports import Directory, InMemoryDirectory, InMemoryTicketStore, TicketStore
from .resolver import EntityResolver
from .query import QueryEngine
from .use_cases import (
    CreateTicketService,
    DeleteTicketService,
    GetTicketService,
    ListStatusesService,
    SearchTicketsService,
    TicketStatsService,
    UpdateTicketService,
)

__all__ = [
    # Entities
    "Department",
    "HelpTopic",
    "MessageFormat",
    "Priority",
    "Sla",
    "SortField",
    "Staff",
    "Team",
    "ThreadEntry",
    "Ticket",
    "TicketStatus",
    # Events
    "TicketCreatedEvent",
    "TicketDeletedEvent",
    "TicketUpdatedEvent",
    # DTOs
    "CreateTicketInputDTO",
    "PaginatedSearchResultDTO",
    "SearchCriteria",
    "StatsSnapshot",
    "TicketDetailDTO",
    "TicketSearchItemDTO",
    "TicketStatusDTO",
    "TicketSummaryDTO",
    "UpdateTicketInputDTO",
    "UpdateTicketResultDTO",
    # Ports
    "Directory",
    "TicketStore",
    "InMemoryDirectory",
    "InMemoryTicketStore",
    # Services
    "EntityResolver",
    "QueryEngine",
    "CreateTicketService",
    "DeleteTicketService",
    "GetTicketService",
    "ListStatusesService",
    "SearchTicketsService",
    "TicketStatsService",
    "UpdateTicketService",
]

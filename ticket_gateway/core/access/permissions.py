"""
Vocabulário de Permissões da API.

Conjunto fixo de capacidades que uma credencial pode possuir.
O valor de cada membro é o nome do campo booleano correspondente
em ``Credential``.

Fallbacks:
    SEARCH_TICKETS → READ_TICKETS
    READ_STATS     → READ_TICKETS

O grafo de fallback é acíclico por construção.
"""

from enum import Enum
from typing import List, Optional


class Permission(Enum):
    """
    Permissões de credencial.

    Example:
        Permission.SEARCH_TICKETS.fallback   # Permission.READ_TICKETS
        Permission.READ_STATS.label          # "Read Statistics"
    """

    CREATE_TICKETS = "can_create_tickets"
    UPDATE_TICKETS = "can_update_tickets"
    READ_TICKETS = "can_read_tickets"
    SEARCH_TICKETS = "can_search_tickets"
    DELETE_TICKETS = "can_delete_tickets"
    READ_STATS = "can_read_stats"
    MANAGE_SUBTICKETS = "can_manage_subtickets"

    @property
    def label(self) -> str:
        """Rótulo legível da permissão."""
        labels = {
            Permission.CREATE_TICKETS: "Create Tickets",
            Permission.UPDATE_TICKETS: "Update Tickets",
            Permission.READ_TICKETS: "Read Tickets",
            Permission.SEARCH_TICKETS: "Search Tickets",
            Permission.DELETE_TICKETS: "Delete Tickets",
            Permission.READ_STATS: "Read Statistics",
            Permission.MANAGE_SUBTICKETS: "Manage Subtickets",
        }
        return labels[self]

    @property
    def fallback(self) -> Optional["Permission"]:
        """
        Permissão mais geral que também satisfaz esta, se houver.

        Returns:
            Permissão de fallback ou None
        """
        fallbacks = {
            Permission.SEARCH_TICKETS: Permission.READ_TICKETS,
            Permission.READ_STATS: Permission.READ_TICKETS,
        }
        return fallbacks.get(self)

    def unauthorized_message(self, context: str = "") -> str:
        """
        Mensagem de erro para acesso negado.

        Args:
            context: O que está sendo lido (usado apenas por READ_TICKETS)

        Returns:
            Mensagem no formato "API key not authorized to <verbo> <contexto>"
        """
        actions = {
            Permission.CREATE_TICKETS: "create tickets",
            Permission.UPDATE_TICKETS: "update tickets",
            Permission.READ_TICKETS: f"read {context or 'this operation'}",
            Permission.SEARCH_TICKETS: "search tickets",
            Permission.DELETE_TICKETS: "delete tickets",
            Permission.READ_STATS: "read ticket statistics",
            Permission.MANAGE_SUBTICKETS: "manage subtickets",
        }
        return f"API key not authorized to {actions[self]}"

    @classmethod
    def column_names(cls) -> List[str]:
        """Nomes dos campos de credencial, na ordem do enum."""
        return [permission.value for permission in cls]

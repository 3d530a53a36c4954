"""
Ports do Domínio de Subtickets.

O relacionamento pai/filho é mantido por um plugin externo
(relationship store), obtido do PluginRegistry pelo nome
``"subticket"``. Um plugin ausente e um plugin inativo são a
mesma condição de indisponibilidade.
"""

from typing import List, Optional, Protocol, runtime_checkable

from ticket_gateway.core.tickets.entities import Ticket
from ticket_gateway.core.tickets.ports import TicketStore


@runtime_checkable
class RelationshipStore(Protocol):
    """
    Interface para o plugin de subtickets.

    Methods:
        is_active: Plugin habilitado
        get_parent: Ticket pai do filho, ou None
        get_children: IDs internos dos filhos, em ordem estável
        create_link: Vincula filho ao pai
        remove_link: Remove o vínculo do filho
    """

    def is_active(self) -> bool:
        ...

    def get_parent(self, ticket: Ticket) -> Optional[Ticket]:
        ...

    def get_children(self, ticket: Ticket) -> List[int]:
        ...

    def create_link(self, parent: Ticket, child: Ticket) -> None:
        ...

    def remove_link(self, child: Ticket) -> None:
        ...


class InMemoryRelationshipStore:
    """
    Relationship store que grava o vínculo no ``pid`` do próprio
    ticket, como o plugin de subtickets do helpdesk.

    Example:
        relationships = InMemoryRelationshipStore(ticket_store)
        registry.register("subticket", relationships)
    """

    def __init__(self, ticket_store: TicketStore, active: bool = True):
        self.ticket_store = ticket_store
        self._active = active

    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        self._active = active

    def get_parent(self, ticket: Ticket) -> Optional[Ticket]:
        if ticket.pid is None:
            return None
        return self.ticket_store.lookup_by_id(ticket.pid)

    def get_children(self, ticket: Ticket) -> List[int]:
        return sorted(self.ticket_store.find_children_ids(ticket))

    def create_link(self, parent: Ticket, child: Ticket) -> None:
        child.pid = parent.id
        self.ticket_store.save(child)

    def remove_link(self, child: Ticket) -> None:
        child.pid = None
        self.ticket_store.save(child)

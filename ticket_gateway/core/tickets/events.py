"""
Domain Events do Domínio de Tickets.

Eventos disparados quando o gateway altera o ticket store.

Eventos:
- TicketCreatedEvent: Ticket criado via API
- TicketUpdatedEvent: Campos alterados e/ou nota postada
- TicketDeletedEvent: Ticket removido (trilha de auditoria)

Uso:
    Publicados pelos use cases logo após a escrita no store.

    store.save(ticket)
    publisher.publish(TicketUpdatedEvent(aggregate_id=ticket.id, ...))
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ticket_gateway.core.shared.events import DomainEvent


@dataclass
class TicketCreatedEvent(DomainEvent):
    """
    Evento: Ticket foi criado.

    Attributes:
        number: Número público do ticket
        subject: Assunto
        dept_id: Departamento final (após overrides)
        parent_id: ID interno do ticket pai, se houver
    """

    number: str = ""
    subject: str = ""
    dept_id: Optional[int] = None
    parent_id: Optional[int] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketUpdatedEvent(DomainEvent):
    """
    Evento: Ticket foi atualizado.

    Attributes:
        number: Número público do ticket
        changed_fields: Campos efetivamente alterados
        note_posted: Se uma nota interna foi postada
    """

    number: str = ""
    changed_fields: List[str] = field(default_factory=list)
    note_posted: bool = False

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketDeletedEvent(DomainEvent):
    """
    Evento: Ticket foi removido.

    Handlers típicos:
    - Auditoria (quem removeu, quantos subtickets foram desvinculados)

    Attributes:
        number: Número do ticket removido
        subject: Assunto (capturado antes da remoção)
        affected_children: IDs dos subtickets que perderam o pai
    """

    number: str = ""
    subject: str = ""
    affected_children: List[int] = field(default_factory=list)

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "subject": self.subject,
            "affected_children": list(self.affected_children),
            "affected_children_count": len(self.affected_children),
        }

"""
Domain Events do Domínio de Subtickets.

Eventos:
- SubticketLinkedEvent: Filho vinculado a um pai
- SubticketUnlinkedEvent: Filho desvinculado do pai

O ``aggregate_id`` é sempre o ID interno do ticket filho.
"""

from dataclasses import dataclass
from typing import Optional

from ticket_gateway.core.shared.events import DomainEvent


@dataclass
class SubticketLinkedEvent(DomainEvent):
    """
    Evento: Vínculo pai/filho criado.

    Attributes:
        parent_id: ID interno do pai
        parent_number: Número público do pai
        child_number: Número público do filho
    """

    parent_id: Optional[int] = None
    parent_number: str = ""
    child_number: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Subticket"


@dataclass
class SubticketUnlinkedEvent(DomainEvent):
    """
    Evento: Vínculo pai/filho removido.

    Attributes:
        parent_id: ID interno do pai anterior
        child_number: Número público do filho
    """

    parent_id: Optional[int] = None
    child_number: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Subticket"

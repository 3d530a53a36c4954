"""
Domínio de Subtickets - Vínculos pai/filho entre tickets.

- RelationshipStore: port do plugin externo de subtickets
- RelationshipManager: máquina de estados Unlinked ⇄ Linked(parent)
- SubticketService: fachada com respostas no formato da API
"""

from .events import SubticketLinkedEvent, SubticketUnlinkedEvent
from .ports import InMemoryRelationshipStore, RelationshipStore
from .manager import RelationshipManager, SubticketLinkDTO
from .service import SubticketService

__all__ = [
    "SubticketLinkedEvent",
    "SubticketUnlinkedEvent",
    "InMemoryRelationshipStore",
    "RelationshipStore",
    "RelationshipManager",
    "SubticketLinkDTO",
    "SubticketService",
]

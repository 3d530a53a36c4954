"""
RelationshipManager - Máquina de estados de subtickets.

Estados por ticket:
    Unlinked ──create_link──▶ Linked(parent)
    Linked(parent) ──unlink_child──▶ Unlinked

Invariantes:
- No máximo um pai por ticket (floresta)
- Um pai que já é filho é rejeitado (um nível de aninhamento)
- Auto-vínculo é inválido
- Criar vínculo já existente, ou com pai diferente, é conflito
- Desvincular filho sem pai é "não encontrado"

A ordem das verificações de cada operação é parte do contrato:
quando várias condições falham, a primeira da lista define o erro.

Não há transação entre ticket store e relationship store:
link/unlink são best-effort e podem ser conferidos via
get_parent/get_list.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ticket_gateway.core.access import Credential, Permission, PermissionChecker
from ticket_gateway.core.shared.exceptions import (
    AuthorizationError,
    BusinessRuleViolationError,
    ConflictError,
    EntityNotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from ticket_gateway.core.shared.interfaces import EventPublisher, PluginRegistry, active_plugin
from ticket_gateway.core.tickets.dtos import TicketSummaryDTO, parse_int
from ticket_gateway.core.tickets.entities import Ticket
from ticket_gateway.core.tickets.resolver import EntityResolver

from .events import SubticketLinkedEvent, SubticketUnlinkedEvent
from .ports import RelationshipStore


logger = logging.getLogger(__name__)


@dataclass
class SubticketLinkDTO:
    """Resultado de create_link: resumos do pai e do filho."""

    parent: TicketSummaryDTO
    child: TicketSummaryDTO

    def to_dict(self) -> dict:
        return {"parent": self.parent.to_dict(), "child": self.child.to_dict()}


def _positive_id(value: Any) -> Optional[int]:
    """ID > 0, ou None se inválido."""
    parsed = parse_int(value)
    if parsed is None or parsed <= 0:
        return None
    return parsed


class RelationshipManager:
    """
    Gerencia vínculos pai/filho entre tickets.

    Instância por requisição: o handle do relationship store é
    obtido uma única vez do PluginRegistry e reutilizado.

    Attributes:
        checker: Avaliação de permissões
        resolver: Localização de tickets e nomes de status
        plugin_registry: Fonte do relationship store
        event_publisher: Publicação de SubticketLinked/Unlinked
        plugin_name: Nome de registro do plugin

    Example:
        manager = RelationshipManager(checker, resolver, registry, publisher)
        link = manager.create_link(credential, 100, 200)
        manager.get_parent(credential, 200).ticket_id  # 100
    """

    def __init__(
        self,
        checker: PermissionChecker,
        resolver: EntityResolver,
        plugin_registry: Optional[PluginRegistry],
        event_publisher: EventPublisher,
        plugin_name: str = "subticket",
    ):
        self.checker = checker
        self.resolver = resolver
        self.plugin_registry = plugin_registry
        self.event_publisher = event_publisher
        self.plugin_name = plugin_name
        self._store: Optional[RelationshipStore] = None
        self._store_probed = False

    # =========================================================================
    # Operações
    # =========================================================================

    def create_link(self, credential: Credential, parent_id: Any, child_id: Any) -> SubticketLinkDTO:
        """
        Vincula ``child_id`` como subticket de ``parent_id``.

        Ordem das verificações:
        1. IDs válidos (> 0)
        2. Pai diferente do filho
        3. Permissão MANAGE_SUBTICKETS
        4. Relationship store disponível
        5. Ambos os tickets existem
        6. Acesso ao departamento de ambos
        7. Filho ainda sem pai
        8. Pai não é filho de outro ticket

        Raises:
            ValidationError: ID inválido ou auto-vínculo (400)
            AuthorizationError: Sem permissão ou fora do escopo (403)
            ServiceUnavailableError: Plugin ausente/inativo (501)
            EntityNotFoundError: Ticket inexistente (404)
            ConflictError: Filho já vinculado (409)
            BusinessRuleViolationError: Pai aninhado (400)
        """
        parent_key = _positive_id(parent_id)
        if parent_key is None:
            raise ValidationError("Invalid parent ticket number", field="parent_id")

        child_key = _positive_id(child_id)
        if child_key is None:
            raise ValidationError("Invalid child ticket number", field="child_id")

        if parent_key == child_key:
            raise ValidationError("Cannot link ticket to itself")

        self._require_permission(credential)
        store = self._require_store()

        parent = self._find(parent_key, "Parent ticket not found")
        child = self._find(child_key, "Child ticket not found")

        self._require_department_access(credential, parent, "Access denied to parent ticket department")
        self._require_department_access(credential, child, "Access denied to child ticket department")

        current_parent = store.get_parent(child)
        if current_parent is not None:
            if current_parent.id == parent.id:
                raise ConflictError("Subticket relationship already exists")
            raise ConflictError("Child ticket already has a different parent")

        if parent.is_child or store.get_parent(parent) is not None:
            raise BusinessRuleViolationError(
                "Parent ticket cannot be a child of another ticket",
                rule="nested_subticket",
            )

        store.create_link(parent, child)

        logger.info(
            f"Subticket vinculado: pai={parent.number} (id={parent.id}), "
            f"filho={child.number} (id={child.id}), key={credential.key_id}"
        )
        self.event_publisher.publish(
            SubticketLinkedEvent(
                aggregate_id=str(child.id),
                actor=credential.key_id or None,
                parent_id=parent.id,
                parent_number=parent.number,
                child_number=child.number,
            )
        )

        return SubticketLinkDTO(parent=self._summary(parent), child=self._summary(child))

    def unlink_child(self, credential: Credential, child_id: Any) -> TicketSummaryDTO:
        """
        Remove o vínculo do filho com seu pai.

        Raises:
            ValidationError: ID inválido (400)
            AuthorizationError: Sem permissão ou fora do escopo (403)
            ServiceUnavailableError: Plugin ausente/inativo (501)
            EntityNotFoundError: Filho inexistente ou sem pai (404)
        """
        child_key = _positive_id(child_id)
        if child_key is None:
            raise ValidationError("Invalid child ticket number", field="child_id")

        self._require_permission(credential)
        store = self._require_store()

        child = self._find(child_key, "Child ticket not found")
        self._require_department_access(credential, child, "Access denied to child ticket department")

        parent = store.get_parent(child)
        if parent is None:
            raise EntityNotFoundError(
                "Child has no parent to unlink",
                entity_type="Subticket",
                entity_id=str(child.id),
            )

        store.remove_link(child)

        logger.info(
            f"Subticket desvinculado: pai={parent.number} (id={parent.id}), "
            f"filho={child.number} (id={child.id}), key={credential.key_id}"
        )
        self.event_publisher.publish(
            SubticketUnlinkedEvent(
                aggregate_id=str(child.id),
                actor=credential.key_id or None,
                parent_id=parent.id,
                child_number=child.number,
            )
        )

        return self._summary(child)

    def get_parent(self, credential: Credential, child_id: Any) -> Optional[TicketSummaryDTO]:
        """
        Retorna o resumo do pai, ou None se o ticket não tem pai.

        Raises:
            ValidationError: ID inválido (400)
            AuthorizationError: Sem permissão (403)
            ServiceUnavailableError: Plugin ausente/inativo (501)
            EntityNotFoundError: Ticket inexistente (404)
        """
        child_key = _positive_id(child_id)
        if child_key is None:
            raise ValidationError("Invalid ticket ID")

        self._require_permission(credential)
        store = self._require_store()

        child = self._find(child_key, "Ticket not found")

        parent = store.get_parent(child)
        if parent is None:
            return None
        return self._summary(parent)

    def get_list(self, credential: Credential, parent_id: Any) -> List[TicketSummaryDTO]:
        """
        Lista os filhos do ticket, na ordem do relationship store.

        IDs órfãos (filho que não existe mais) são ignorados.

        Raises:
            ValidationError: ID inválido (400)
            AuthorizationError: Sem permissão (403)
            ServiceUnavailableError: Plugin ausente/inativo (501)
            EntityNotFoundError: Pai inexistente (404)
        """
        parent_key = _positive_id(parent_id)
        if parent_key is None:
            raise ValidationError("Invalid ticket number")

        self._require_permission(credential)
        store = self._require_store()

        parent = self._find(parent_key, "Parent ticket not found")

        children = []
        for child_id in store.get_children(parent) or []:
            child = self.resolver.ticket_store.lookup_by_id(child_id)
            if child is None:
                logger.debug(f"Subticket órfão ignorado: {child_id} (pai={parent.id})")
                continue
            children.append(self._summary(child))
        return children

    # =========================================================================
    # Auxiliares
    # =========================================================================

    def relationship_store(self) -> Optional[RelationshipStore]:
        """Handle do plugin (obtido uma vez por instância), ou None."""
        if not self._store_probed:
            self._store = active_plugin(self.plugin_registry, self.plugin_name)
            self._store_probed = True
        return self._store

    def is_available(self) -> bool:
        return self.relationship_store() is not None

    def _require_store(self) -> RelationshipStore:
        store = self.relationship_store()
        if store is None:
            raise ServiceUnavailableError(
                "Subticket plugin not available",
                service=self.plugin_name,
            )
        return store

    def _require_permission(self, credential: Credential) -> None:
        self.checker.authenticate(credential)
        if not self.checker.has(credential, Permission.MANAGE_SUBTICKETS):
            raise AuthorizationError(
                "API key not authorized for subticket operations",
                permission=Permission.MANAGE_SUBTICKETS.value,
            )

    def _require_department_access(self, credential: Credential, ticket: Ticket, message: str) -> None:
        if not self.checker.can_access_department(credential, ticket.dept_id):
            raise AuthorizationError(message)

    def _find(self, ticket_key: int, not_found_message: str) -> Ticket:
        ticket = self.resolver.find_ticket(ticket_key)
        if ticket is None:
            raise EntityNotFoundError(
                not_found_message,
                entity_type="Ticket",
                entity_id=str(ticket_key),
            )
        return ticket

    def _summary(self, ticket: Ticket) -> TicketSummaryDTO:
        return TicketSummaryDTO.from_ticket(ticket, self.resolver.directory)

"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo contém os casos de uso do gateway. Cada um orquestra
PermissionChecker → EntityResolver → QueryEngine / ticket store.

Use Cases implementados:
- GetTicketService: Obtém ticket com thread e subtickets
- UpdateTicketService: Atualiza campos e posta nota interna
- CreateTicketService: Cria ticket com overrides de departamento/pai
- DeleteTicketService: Remove ticket (com auditoria)
- SearchTicketsService: Busca paginada
- TicketStatsService: Estatísticas agregadas
- ListStatusesService: Lista status disponíveis

Responsabilidades dos Use Cases:
- Autenticar credencial e exigir permissão
- Resolver referências enviadas pelo cliente
- Persistir via ticket store
- Publicar eventos de domínio
- Retornar DTOs de saída

Princípios:
- Um Use Case = Uma operação da API
- Dependências injetadas (DI)
- Erros de domínio propagam sem re-embrulho; apenas falhas
  inesperadas viram InternalError
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Union

from ticket_gateway.core.access import Credential, Permission, PermissionChecker
from ticket_gateway.core.shared.exceptions import (
    AuthorizationError,
    DomainException,
    EntityNotFoundError,
    InternalError,
    ValidationError,
)
from ticket_gateway.core.shared.interfaces import EventPublisher

from .dtos import (
    CreateTicketInputDTO,
    PaginatedSearchResultDTO,
    SearchCriteria,
    StatsSnapshot,
    TicketDetailDTO,
    TicketStatusDTO,
    UpdateTicketInputDTO,
    UpdateTicketResultDTO,
)
from .entities import MessageFormat, Ticket
from .events import TicketCreatedEvent, TicketDeletedEvent, TicketUpdatedEvent
from .ports import Directory, TicketStore
from .query import QueryEngine
from .resolver import EntityResolver


logger = logging.getLogger(__name__)


def _find_ticket_or_404(resolver: EntityResolver, identifier: Union[int, str]) -> Ticket:
    """Número público primeiro, ID interno depois."""
    ticket = resolver.find_ticket(identifier)
    if ticket is None:
        raise EntityNotFoundError(
            "Ticket not found",
            entity_type="Ticket",
            entity_id=str(identifier),
        )
    return ticket


def _require_department_access(
    checker: PermissionChecker,
    credential: Credential,
    ticket: Ticket,
) -> None:
    if not checker.can_access_department(credential, ticket.dept_id):
        raise AuthorizationError("Access denied to ticket department")


class GetTicketService:
    """
    Use Case: Obter ticket completo.

    Fluxo:
    1. Autenticar e exigir READ_TICKETS
    2. Localizar ticket (número, depois ID)
    3. Verificar escopo de departamento
    4. Montar DTO com nomes, subtickets e thread

    Example:
        service = GetTicketService(checker, resolver, store, directory)
        detail = service.execute(credential, "680285")
        print(detail.children)
    """

    def __init__(
        self,
        checker: PermissionChecker,
        resolver: EntityResolver,
        ticket_store: TicketStore,
        directory: Directory,
    ):
        self.checker = checker
        self.resolver = resolver
        self.ticket_store = ticket_store
        self.directory = directory

    def execute(self, credential: Credential, identifier: Union[int, str]) -> TicketDetailDTO:
        """
        Args:
            credential: Credencial do chamador
            identifier: Número público ou ID interno

        Returns:
            DTO detalhado

        Raises:
            AuthenticationError: Credencial ausente/inativa
            AuthorizationError: Sem permissão de leitura ou fora do escopo
            EntityNotFoundError: Ticket não existe
        """
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.READ_TICKETS, "tickets")

        ticket = _find_ticket_or_404(self.resolver, identifier)
        _require_department_access(self.checker, credential, ticket)

        children = self.ticket_store.find_children_ids(ticket)
        return TicketDetailDTO.from_ticket(ticket, self.directory, children)


class UpdateTicketService:
    """
    Use Case: Atualizar ticket.

    Fluxo:
    1. Autenticar e exigir UPDATE_TICKETS
    2. Localizar ticket
    3. Resolver todas as referências e o formato da nota (antes de alterar qualquer campo)
    4. Calcular apenas valores diferentes dos atuais (idempotente)
    5. Postar nota interna, se enviada
    6. Aplicar os valores, persistir uma única vez e publicar TicketUpdatedEvent

    Attributes:
        default_note_title: Título quando ``note_title`` não é enviado
        default_note_format: Formato quando ``note_format`` não é enviado
        require_markdown_plugin: Rejeitar "markdown" sem o plugin ativo
    """

    def __init__(
        self,
        checker: PermissionChecker,
        resolver: EntityResolver,
        ticket_store: TicketStore,
        event_publisher: EventPublisher,
        default_note_title: str = "API Update",
        default_note_format: str = MessageFormat.MARKDOWN.value,
        require_markdown_plugin: bool = False,
    ):
        self.checker = checker
        self.resolver = resolver
        self.ticket_store = ticket_store
        self.event_publisher = event_publisher
        self.default_note_title = default_note_title
        self.default_note_format = default_note_format
        self.require_markdown_plugin = require_markdown_plugin

    def execute(
        self,
        credential: Credential,
        number: Union[int, str],
        input_dto: UpdateTicketInputDTO,
    ) -> UpdateTicketResultDTO:
        """
        Executa atualização.

        Raises:
            ValidationError: Valor malformado, pai igual ao próprio ticket,
                formato inválido ou falha ao postar nota
            BusinessRuleViolationError: Referência inativa ou pai aninhado
            EntityNotFoundError: Ticket ou referência inexistente
        """
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.UPDATE_TICKETS)

        ticket = _find_ticket_or_404(self.resolver, number)
        _require_department_access(self.checker, credential, ticket)

        values = self._resolve_values(ticket, input_dto)
        note_format = None
        if input_dto.has_note:
            note_format = self.resolver.negotiate_message_format(
                input_dto.note_format or self.default_note_format,
                require_markdown_plugin=self.require_markdown_plugin,
            )

        changes = {
            attribute: value
            for attribute, value in values.items()
            if getattr(ticket, attribute) != value
        }
        changed_fields = list(changes)

        # Nota antes dos campos: uma falha ao postar não deixa o ticket alterado
        note_posted = False
        if note_format is not None:
            note_posted = self._post_note(ticket, input_dto, note_format)

        if changes:
            for attribute, value in changes.items():
                setattr(ticket, attribute, value)
            self.ticket_store.save(ticket)

        if changed_fields or note_posted:
            logger.info(
                f"Ticket {ticket.number} atualizado: "
                f"campos={changed_fields}, nota={note_posted}"
            )
            self.event_publisher.publish(
                TicketUpdatedEvent(
                    aggregate_id=str(ticket.id),
                    actor=credential.key_id or None,
                    number=ticket.number,
                    changed_fields=list(changed_fields),
                    note_posted=note_posted,
                )
            )

        return UpdateTicketResultDTO(
            number=ticket.number,
            changed_fields=tuple(changed_fields),
            note_posted=note_posted,
        )

    def _resolve_values(self, ticket: Ticket, input_dto: UpdateTicketInputDTO) -> Dict[str, Any]:
        """Resolve referências enviadas → {atributo do ticket: valor}."""
        values: Dict[str, Any] = {}

        if input_dto.department is not None:
            values["dept_id"] = self.resolver.resolve_department(input_dto.department)

        if input_dto.topic is not None:
            values["topic_id"] = self.resolver.resolve_topic(input_dto.topic)

        if input_dto.parent_ticket_number is not None:
            parent_id = self.resolver.resolve_parent_ticket(input_dto.parent_ticket_number)
            if parent_id == ticket.id:
                raise ValidationError(
                    "Cannot link ticket to itself",
                    field="parentTicketNumber",
                )
            values["pid"] = parent_id

        if input_dto.status is not None:
            values["status_id"] = self.resolver.resolve_status(input_dto.status)

        if input_dto.sla is not None:
            values["sla_id"] = self.resolver.resolve_sla(input_dto.sla)

        if input_dto.staff is not None:
            values["staff_id"] = self.resolver.resolve_staff(input_dto.staff)

        if input_dto.due_date is not None:
            values["due_date"] = self.resolver.resolve_due_date(input_dto.due_date)

        return values

    def _post_note(self, ticket: Ticket, input_dto: UpdateTicketInputDTO, note_format: str) -> bool:
        title = input_dto.note_title or self.default_note_title

        if not self.ticket_store.post_note(ticket, input_dto.note, title, note_format):
            raise ValidationError("Failed to post note", field="note")
        return True


class CreateTicketService:
    """
    Use Case: Criar ticket.

    Departamento e ticket pai são validados ANTES da criação e
    aplicados DEPOIS dela, pois o roteamento do helpdesk
    (tópico → departamento) pode sobrescrevê-los.

    Example:
        service = CreateTicketService(checker, resolver, store, directory, publisher)
        detail = service.execute(credential, CreateTicketInputDTO(
            subject="Printer down",
            message="...",
            name="Jane",
            email="jane@example.com",
            department="Support / Hardware",
        ))
    """

    def __init__(
        self,
        checker: PermissionChecker,
        resolver: EntityResolver,
        ticket_store: TicketStore,
        directory: Directory,
        event_publisher: EventPublisher,
        require_markdown_plugin: bool = False,
    ):
        self.checker = checker
        self.resolver = resolver
        self.ticket_store = ticket_store
        self.directory = directory
        self.event_publisher = event_publisher
        self.require_markdown_plugin = require_markdown_plugin

    def execute(self, credential: Credential, input_dto: CreateTicketInputDTO) -> TicketDetailDTO:
        """
        Executa criação.

        Raises:
            ValidationError: Formato inválido ou Markdown exigido e inativo
            EntityNotFoundError / BusinessRuleViolationError: Referências inválidas
            InternalError: Store não criou o ticket
        """
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.CREATE_TICKETS)

        message_format = MessageFormat.HTML.value
        if input_dto.format is not None:
            message_format = self.resolver.negotiate_message_format(
                input_dto.format,
                require_markdown_plugin=self.require_markdown_plugin,
            )

        dept_id = None
        if input_dto.department is not None:
            dept_id = self.resolver.resolve_department(input_dto.department)
            if not self.checker.can_access_department(credential, dept_id):
                raise AuthorizationError("Access denied to ticket department")

        parent_id = None
        if input_dto.parent_ticket_number is not None:
            parent_id = self.resolver.resolve_parent_ticket(input_dto.parent_ticket_number)

        topic_id = None
        if input_dto.topic is not None:
            topic_id = self.resolver.resolve_topic(input_dto.topic)

        ticket = self.ticket_store.create({
            "subject": input_dto.subject,
            "message": input_dto.message,
            "name": input_dto.name,
            "email": input_dto.email,
            "topic_id": topic_id,
            "dept_id": dept_id,
            "priority_id": input_dto.priority_id,
            "format": message_format,
            "source": input_dto.source,
            "ip": input_dto.ip,
        })
        if ticket is None:
            logger.error(f"Ticket store não criou ticket: subject={input_dto.subject!r}")
            raise InternalError("Failed to create ticket")

        overridden = False
        if dept_id is not None and ticket.dept_id != dept_id:
            ticket.dept_id = dept_id
            overridden = True
        if parent_id is not None and ticket.pid != parent_id:
            ticket.pid = parent_id
            overridden = True
        if overridden:
            self.ticket_store.save(ticket)

        logger.info(f"Ticket {ticket.number} criado (id={ticket.id}, dept={ticket.dept_id})")
        self.event_publisher.publish(
            TicketCreatedEvent(
                aggregate_id=str(ticket.id),
                actor=credential.key_id or None,
                number=ticket.number,
                subject=ticket.subject,
                dept_id=ticket.dept_id,
                parent_id=ticket.pid,
            )
        )

        children = self.ticket_store.find_children_ids(ticket)
        return TicketDetailDTO.from_ticket(ticket, self.directory, children)


class DeleteTicketService:
    """
    Use Case: Remover ticket.

    Retorna sempre o NÚMERO do ticket, mesmo quando o ID interno
    foi informado. Subtickets perdem a referência ao pai
    (responsabilidade do store).
    """

    def __init__(
        self,
        checker: PermissionChecker,
        resolver: EntityResolver,
        ticket_store: TicketStore,
        event_publisher: EventPublisher,
    ):
        self.checker = checker
        self.resolver = resolver
        self.ticket_store = ticket_store
        self.event_publisher = event_publisher

    def execute(self, credential: Credential, identifier: Union[int, str]) -> str:
        """
        Raises:
            AuthenticationError / AuthorizationError: Sem credencial ou permissão
            EntityNotFoundError: Ticket não existe
            InternalError: Falha inesperada na remoção
        """
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.DELETE_TICKETS)

        try:
            ticket = _find_ticket_or_404(self.resolver, identifier)
            _require_department_access(self.checker, credential, ticket)

            number, ticket_id, subject = ticket.number, ticket.id, ticket.subject
            children = list(self.ticket_store.find_children_ids(ticket))

            self.ticket_store.delete(ticket)
        except DomainException:
            raise
        except Exception:
            logger.exception(f"Falha ao remover ticket {identifier}")
            raise InternalError("Failed to delete ticket")

        logger.info(
            f"Ticket removido: number={number}, id={ticket_id}, "
            f"subject={subject!r}, key={credential.key_id}, "
            f"subtickets_desvinculados={len(children)}"
        )
        self.event_publisher.publish(
            TicketDeletedEvent(
                aggregate_id=str(ticket_id),
                actor=credential.key_id or None,
                number=number,
                subject=subject,
                affected_children=children,
            )
        )
        return number


class SearchTicketsService:
    """
    Use Case: Buscar tickets com filtros, paginação e ordenação.

    Exige SEARCH_TICKETS (com fallback para READ_TICKETS).
    """

    def __init__(
        self,
        checker: PermissionChecker,
        query_engine: QueryEngine,
        default_limit: int = 20,
        max_limit: int = 100,
    ):
        self.checker = checker
        self.query_engine = query_engine
        self.default_limit = default_limit
        self.max_limit = max_limit

    def execute(
        self,
        credential: Credential,
        params: Union[SearchCriteria, Dict[str, Any], None] = None,
    ) -> PaginatedSearchResultDTO:
        """
        Args:
            credential: Credencial do chamador
            params: Parâmetros brutos da requisição ou critérios prontos

        Returns:
            Página de resultados
        """
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.SEARCH_TICKETS)

        if isinstance(params, SearchCriteria):
            criteria = params
            if criteria.limit > self.max_limit:
                criteria = replace(criteria, limit=self.max_limit)
        else:
            criteria = SearchCriteria.from_params(
                params or {},
                default_limit=self.default_limit,
                max_limit=self.max_limit,
            )

        items = self.query_engine.search(
            criteria,
            department_scope=credential.allowed_department_ids,
        )
        return PaginatedSearchResultDTO(
            items=items,
            limit=criteria.limit,
            offset=criteria.offset,
            sort=criteria.sort.value,
        )


class TicketStatsService:
    """
    Use Case: Estatísticas agregadas.

    Exige READ_STATS (com fallback para READ_TICKETS).
    """

    def __init__(self, checker: PermissionChecker, query_engine: QueryEngine):
        self.checker = checker
        self.query_engine = query_engine

    def execute(self, credential: Credential) -> StatsSnapshot:
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.READ_STATS)

        try:
            return self.query_engine.aggregate(
                department_scope=credential.allowed_department_ids,
            )
        except DomainException:
            raise
        except Exception:
            logger.exception(f"Falha ao agregar estatísticas (key={credential.key_id})")
            raise InternalError("Failed to retrieve ticket statistics")


class ListStatusesService:
    """
    Use Case: Listar status de ticket, ordenados por ``sort``.
    """

    def __init__(self, checker: PermissionChecker, directory: Directory):
        self.checker = checker
        self.directory = directory

    def execute(self, credential: Credential) -> List[TicketStatusDTO]:
        self.checker.authenticate(credential)
        self.checker.require(credential, Permission.READ_STATS)

        try:
            statuses = sorted(self.directory.list_statuses(), key=lambda s: s.sort)
        except DomainException:
            raise
        except Exception:
            logger.exception(f"Falha ao listar status (key={credential.key_id})")
            raise InternalError("Failed to retrieve ticket statuses")

        return [
            TicketStatusDTO(id=status.id, name=status.name, state=status.state)
            for status in statuses
        ]

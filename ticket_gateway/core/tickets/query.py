"""
QueryEngine - Busca multi-critério e agregação de estatísticas.

Busca:
    assunto contém (case-insensitive) → status → departamento
    → ordenação → offset/limit

Estatísticas:
    passagem única sobre os tickets; buckets por departamento
    (ordem alfabética) e por staff (ordenado pelo nome).
"""

import logging
import re
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from .dtos import (
    DepartmentStatsDTO,
    SearchCriteria,
    StaffDepartmentStatsDTO,
    StaffStatsDTO,
    StatsSnapshot,
    TicketSearchItemDTO,
)
from .entities import SortField, Ticket
from .ports import Directory, TicketStore
from .resolver import EntityResolver, is_numeric_reference


logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def number_sort_key(number: str) -> Tuple[Any, ...]:
    """
    Chave de ordenação natural para números de ticket.

    "ABC9" vem antes de "ABC10".
    """
    parts = _DIGITS.split(str(number))
    return tuple(int(part) if index % 2 else part.lower() for index, part in enumerate(parts))


class QueryEngine:
    """
    Compõe buscas e agrega estatísticas sobre o ticket store.

    Attributes:
        ticket_store: Fonte dos tickets
        directory: Dados de referência (nomes de departamento/staff)
        resolver: Resolve filtros por nome ou caminho

    Example:
        engine = QueryEngine(store, directory, resolver)
        items = engine.search(SearchCriteria(query="printer", limit=10))
    """

    def __init__(
        self,
        ticket_store: TicketStore,
        directory: Directory,
        resolver: EntityResolver,
    ):
        self.ticket_store = ticket_store
        self.directory = directory
        self.resolver = resolver

    # =========================================================================
    # Busca
    # =========================================================================

    def search(
        self,
        criteria: SearchCriteria,
        department_scope: Optional[FrozenSet[int]] = None,
    ) -> List[TicketSearchItemDTO]:
        """
        Executa busca com filtros, ordenação e paginação.

        Filtros numéricos são usados como estão (ID inexistente
        resulta em lista vazia); filtros por nome/caminho que não
        resolvem lançam EntityNotFoundError.

        Args:
            criteria: Critérios já normalizados
            department_scope: Departamentos visíveis (None = todos)

        Returns:
            Itens da página solicitada
        """
        status_id = self._status_filter(criteria.status)
        dept_id = self._department_filter(criteria.department)

        tickets = self._in_scope(self.ticket_store.list_all(), department_scope)

        if criteria.query:
            needle = criteria.query.lower()
            tickets = [t for t in tickets if needle in (t.subject or "").lower()]

        if status_id is not None:
            tickets = [t for t in tickets if t.status_id == status_id]

        if dept_id is not None:
            tickets = [t for t in tickets if t.dept_id == dept_id]

        ordered = self._sort(tickets, criteria.sort)
        page = ordered[criteria.offset:criteria.offset + criteria.limit]

        logger.debug(
            f"Busca {criteria.to_dict()}: {len(ordered)} encontrados, {len(page)} na página"
        )
        return [TicketSearchItemDTO.from_ticket(ticket, self.directory) for ticket in page]

    def _status_filter(self, value: Optional[Union[int, str]]) -> Optional[int]:
        if value is None:
            return None
        if is_numeric_reference(value):
            return int(value)
        return self.resolver.status_id_for(value)

    def _department_filter(self, value: Optional[Union[int, str]]) -> Optional[int]:
        if value is None:
            return None
        return self.resolver.department_id_for(value)

    @staticmethod
    def _in_scope(
        tickets: Iterable[Ticket],
        department_scope: Optional[FrozenSet[int]],
    ) -> List[Ticket]:
        if department_scope is None:
            return list(tickets)
        return [t for t in tickets if t.dept_id is not None and t.dept_id in department_scope]

    @staticmethod
    def _sort(tickets: Iterable[Ticket], sort: SortField) -> List[Ticket]:
        if sort is SortField.NUMBER:
            return sorted(tickets, key=lambda t: number_sort_key(t.number))
        if sort is SortField.UPDATED:
            return sorted(tickets, key=lambda t: t.updated, reverse=True)
        return sorted(tickets, key=lambda t: t.created, reverse=True)

    # =========================================================================
    # Estatísticas
    # =========================================================================

    def aggregate(
        self,
        tickets: Optional[Iterable[Ticket]] = None,
        department_scope: Optional[FrozenSet[int]] = None,
    ) -> StatsSnapshot:
        """
        Agrega estatísticas em uma única passagem.

        - "closed" = ticket possui timestamp de fechamento
        - "overdue" = predicado do próprio ticket
        - Tickets sem departamento/staff resolvível contam apenas
          no total global

        Args:
            tickets: Tickets a agregar (default: todos do store)
            department_scope: Departamentos visíveis (None = todos)

        Returns:
            StatsSnapshot com buckets ordenados
        """
        if tickets is None:
            tickets = self.ticket_store.list_all()
        tickets = self._in_scope(tickets, department_scope)

        snapshot = StatsSnapshot()
        departments: Dict[str, DepartmentStatsDTO] = {}
        staff_buckets: Dict[int, StaffStatsDTO] = {}

        for ticket in tickets:
            is_closed = ticket.is_closed
            is_overdue = bool(ticket.is_overdue)

            snapshot.total += 1
            if is_closed:
                snapshot.closed += 1
            else:
                snapshot.open += 1
            if is_overdue:
                snapshot.overdue += 1

            department = None
            if ticket.dept_id is not None:
                department = self.directory.get_department(ticket.dept_id)
            if department is not None:
                departments.setdefault(department.name, DepartmentStatsDTO()).count(
                    is_closed, is_overdue
                )

            if not ticket.staff_id:
                continue
            staff = self.directory.lookup_staff(ticket.staff_id)
            if staff is None:
                continue

            bucket = staff_buckets.get(ticket.staff_id)
            if bucket is None:
                bucket = StaffStatsDTO(staff_id=ticket.staff_id, staff_name=staff.name)
                staff_buckets[ticket.staff_id] = bucket
            bucket.total += 1

            if department is not None:
                bucket.departments.setdefault(
                    department.name, StaffDepartmentStatsDTO()
                ).count(is_closed, is_overdue)

        snapshot.by_department = dict(sorted(departments.items()))
        snapshot.by_staff = sorted(staff_buckets.values(), key=lambda s: s.staff_name)
        return snapshot

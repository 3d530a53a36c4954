"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento das entidades do ticket store para o chamador.

Tipos de DTOs:
- Input DTOs: Parâmetros de criação/atualização vindos da API
- Output DTOs: Respostas (detalhe, item de busca, resumo, stats)
- Query DTOs: Critérios de busca normalizados

As chaves de ``to_dict()`` seguem o contrato público da API
(``statusId``, ``departmentId``, ``dueDate`` ...).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from .entities import SortField, Ticket, ThreadEntry
from .ports import Directory


DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Formata datetime no padrão do helpdesk ("YYYY-MM-DD HH:MM:SS")."""
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)


def parse_int(value: Any) -> Optional[int]:
    """
    Converte parâmetro de query string para int.

    Returns:
        Inteiro, ou None se ausente/não numérico
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lstrip("+-").isdigit():
        return int(text)
    return None


def _name_of(entity: Any) -> Optional[str]:
    return entity.name if entity is not None else None


def _reference_names(ticket: Ticket, directory: Directory) -> Dict[str, Optional[str]]:
    """Nomes das entidades referenciadas pelo ticket."""
    status = directory.get_status(ticket.status_id) if ticket.status_id is not None else None
    priority = directory.get_priority(ticket.priority_id) if ticket.priority_id is not None else None
    department = directory.get_department(ticket.dept_id) if ticket.dept_id is not None else None
    topic = directory.get_topic(ticket.topic_id) if ticket.topic_id is not None else None
    staff = directory.lookup_staff(ticket.staff_id) if ticket.staff_id is not None else None
    team = directory.get_team(ticket.team_id) if ticket.team_id is not None else None
    sla = directory.get_sla(ticket.sla_id) if ticket.sla_id is not None else None
    return {
        "status": _name_of(status),
        "priority": _name_of(priority),
        "department": _name_of(department),
        "topic": _name_of(topic),
        "staff": _name_of(staff),
        "team": _name_of(team),
        "sla": _name_of(sla),
    }


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class UpdateTicketInputDTO:
    """
    DTO de entrada para atualizar ticket.

    Campos None não foram enviados e não são alterados.
    ``due_date=""`` limpa o prazo.

    Attributes:
        department: ID, nome ou caminho do departamento
        topic: ID ou nome do Help Topic
        parent_ticket_number: Número (ou ID) do ticket pai
        status: ID ou nome do status
        sla: ID ou nome do SLA
        staff: ID, username ou email do staff
        due_date: Prazo em ISO 8601
        note: Nota interna a ser postada
        note_title: Título da nota (default da configuração)
        note_format: Formato da nota (default da configuração)
    """

    department: Optional[Union[int, str]] = None
    topic: Optional[Union[int, str]] = None
    parent_ticket_number: Optional[Union[int, str]] = None
    status: Optional[Union[int, str]] = None
    sla: Optional[Union[int, str]] = None
    staff: Optional[Union[int, str]] = None
    due_date: Optional[str] = None
    note: Optional[str] = None
    note_title: Optional[str] = None
    note_format: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdateTicketInputDTO":
        """Constrói DTO a partir do corpo da requisição."""
        due_date = data.get("dueDate")
        if "dueDate" in data and due_date is None:
            due_date = ""
        return cls(
            department=data.get("departmentId"),
            topic=data.get("topicId"),
            parent_ticket_number=data.get("parentTicketNumber"),
            status=data.get("statusId"),
            sla=data.get("slaId"),
            staff=data.get("staffId"),
            due_date=due_date,
            note=data.get("note"),
            note_title=data.get("noteTitle"),
            note_format=data.get("noteFormat"),
        )

    @property
    def has_note(self) -> bool:
        return self.note is not None and self.note.strip() != ""

    def to_dict(self) -> dict:
        return {
            "departmentId": self.department,
            "topicId": self.topic,
            "parentTicketNumber": self.parent_ticket_number,
            "statusId": self.status,
            "slaId": self.sla,
            "staffId": self.staff,
            "dueDate": self.due_date,
            "note": self.note,
            "noteTitle": self.note_title,
            "noteFormat": self.note_format,
        }


@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    DTO de entrada para criar ticket.

    ``department`` e ``parent_ticket_number`` são validados antes da
    criação e aplicados depois dela, pois o roteamento do helpdesk
    (tópico → departamento) pode sobrescrevê-los.
    """

    subject: str
    message: str
    name: str
    email: str
    topic: Optional[Union[int, str]] = None
    department: Optional[Union[int, str]] = None
    parent_ticket_number: Optional[Union[int, str]] = None
    format: Optional[str] = None
    priority_id: Optional[int] = None
    source: str = "API"
    ip: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreateTicketInputDTO":
        return cls(
            subject=data.get("subject", ""),
            message=data.get("message", ""),
            name=data.get("name", ""),
            email=data.get("email", ""),
            topic=data.get("topicId"),
            department=data.get("departmentId"),
            parent_ticket_number=data.get("parentTicketNumber"),
            format=data.get("format"),
            priority_id=parse_int(data.get("priorityId")),
            source=data.get("source", "API"),
            ip=data.get("ip", ""),
        )

    def to_dict(self) -> dict:
        return {
            "subject": self.subject,
            "message": self.message,
            "name": self.name,
            "email": self.email,
            "topicId": self.topic,
            "departmentId": self.department,
            "parentTicketNumber": self.parent_ticket_number,
            "format": self.format,
            "priorityId": self.priority_id,
            "source": self.source,
            "ip": self.ip,
        }


# =============================================================================
# QUERY DTOs (Critérios de Busca)
# =============================================================================

@dataclass(frozen=True)
class SearchCriteria:
    """
    Critérios de busca normalizados.

    Attributes:
        query: Substring do assunto (case-insensitive)
        status: ID ou nome do status
        department: ID, nome ou caminho do departamento
        limit: Itens por página, em [1, 100]
        offset: Deslocamento, >= 0
        sort: Campo de ordenação
    """

    query: Optional[str] = None
    status: Optional[Union[int, str]] = None
    department: Optional[Union[int, str]] = None
    limit: int = DEFAULT_SEARCH_LIMIT
    offset: int = 0
    sort: SortField = SortField.CREATED

    def __post_init__(self):
        # frozen: normaliza via object.__setattr__
        if self.limit is None or self.limit < 1:
            object.__setattr__(self, "limit", DEFAULT_SEARCH_LIMIT)
        elif self.limit > MAX_SEARCH_LIMIT:
            object.__setattr__(self, "limit", MAX_SEARCH_LIMIT)
        if self.offset is None or self.offset < 0:
            object.__setattr__(self, "offset", 0)

    @classmethod
    def from_params(
        cls,
        params: Dict[str, Any],
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        max_limit: int = MAX_SEARCH_LIMIT,
    ) -> "SearchCriteria":
        """
        Normaliza parâmetros brutos da requisição.

        - limit < 1 ou não numérico → ``default_limit``; > ``max_limit`` → ``max_limit``
        - offset negativo ou não numérico → 0
        - sort desconhecido → ``created``

        Example:
            SearchCriteria.from_params({"limit": "150"}).limit  # 100
        """
        query = params.get("query")
        if query is not None:
            query = str(query).strip() or None

        limit = parse_int(params.get("limit"))
        if limit is None or limit < 1:
            limit = default_limit
        limit = min(limit, max_limit)

        offset = parse_int(params.get("offset"))
        if offset is None or offset < 0:
            offset = 0

        return cls(
            query=query,
            status=cls._clean_filter(params.get("status")),
            department=cls._clean_filter(params.get("department")),
            limit=limit,
            offset=offset,
            sort=SortField.from_string(params.get("sort")),
        )

    @staticmethod
    def _clean_filter(value: Any) -> Optional[Union[int, str]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "status": self.status,
            "department": self.department,
            "limit": self.limit,
            "offset": self.offset,
            "sort": self.sort.value,
        }


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketSummaryDTO:
    """
    Resumo de ticket usado nas respostas de subtickets.

    O status cai para "Unknown" quando não pode ser resolvido.
    """

    ticket_id: int
    number: str
    subject: str
    status: str

    @classmethod
    def from_ticket(cls, ticket: Ticket, directory: Directory) -> "TicketSummaryDTO":
        status = None
        if ticket.status_id is not None:
            status = directory.get_status(ticket.status_id)
        return cls(
            ticket_id=int(ticket.id),
            number=ticket.number,
            subject=ticket.subject,
            status=status.name if status is not None else "Unknown",
        )

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "number": self.number,
            "subject": self.subject,
            "status": self.status,
        }


@dataclass
class TicketSearchItemDTO:
    """
    Item de resultado de busca (registro leve, sem thread).
    """

    id: int
    number: str
    subject: str
    status_id: Optional[int]
    status: Optional[str]
    priority_id: Optional[int]
    priority: Optional[str]
    department_id: Optional[int]
    department: Optional[str]
    topic_id: Optional[int]
    topic: Optional[str]
    created: Optional[str]
    updated: Optional[str]
    due_date: Optional[str]
    staff_id: Optional[int]
    staff: Optional[str]
    team_id: Optional[int]
    team: Optional[str]
    sla_id: Optional[int]
    sla: Optional[str]
    is_overdue: bool
    is_answered: bool

    @classmethod
    def from_ticket(cls, ticket: Ticket, directory: Directory) -> "TicketSearchItemDTO":
        """
        Factory method para converter ticket em item de busca.

        Args:
            ticket: Registro do ticket store
            directory: Fonte dos nomes das entidades referenciadas
        """
        names = _reference_names(ticket, directory)
        return cls(
            id=ticket.id,
            number=ticket.number,
            subject=ticket.subject,
            status_id=ticket.status_id,
            status=names["status"],
            priority_id=ticket.priority_id,
            priority=names["priority"],
            department_id=ticket.dept_id,
            department=names["department"],
            topic_id=ticket.topic_id,
            topic=names["topic"],
            created=format_datetime(ticket.created),
            updated=format_datetime(ticket.updated),
            due_date=ticket.due_date,
            staff_id=ticket.staff_id,
            staff=names["staff"],
            team_id=ticket.team_id,
            team=names["team"],
            sla_id=ticket.sla_id,
            sla=names["sla"],
            is_overdue=ticket.is_overdue,
            is_answered=ticket.is_answered,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "subject": self.subject,
            "statusId": self.status_id,
            "status": self.status,
            "priorityId": self.priority_id,
            "priority": self.priority,
            "departmentId": self.department_id,
            "department": self.department,
            "topicId": self.topic_id,
            "topic": self.topic,
            "created": self.created,
            "updated": self.updated,
            "dueDate": self.due_date,
            "staffId": self.staff_id,
            "staff": self.staff,
            "teamId": self.team_id,
            "team": self.team,
            "slaId": self.sla_id,
            "sla": self.sla,
            "isOverdue": self.is_overdue,
            "isAnswered": self.is_answered,
        }


@dataclass
class ThreadEntryDTO:
    """Entrada da thread; dados de staff/usuário só quando presentes."""

    id: int
    type: str
    poster: str
    timestamp: Optional[str]
    body: str
    staff_id: Optional[int] = None
    staff: Optional[str] = None
    user_id: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: ThreadEntry, directory: Directory) -> "ThreadEntryDTO":
        staff = None
        if entry.staff_id:
            staff = _name_of(directory.lookup_staff(entry.staff_id))
        return cls(
            id=entry.id,
            type=entry.type,
            poster=entry.poster,
            timestamp=format_datetime(entry.created),
            body=entry.body,
            staff_id=entry.staff_id or None,
            staff=staff,
            user_id=entry.user_id or None,
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "type": self.type,
            "poster": self.poster,
            "timestamp": self.timestamp,
            "body": self.body,
        }
        if self.staff_id:
            result["staffId"] = self.staff_id
            result["staff"] = self.staff
        if self.user_id:
            result["userId"] = self.user_id
        return result


@dataclass
class TicketDetailDTO:
    """
    DTO de saída completo com dados do ticket.

    Usado para resposta detalhada de um único ticket, incluindo
    IDs dos subtickets e todas as entradas da thread.
    """

    id: int
    number: str
    subject: str
    status_id: Optional[int]
    status: Optional[str]
    priority_id: Optional[int]
    priority: Optional[str]
    department_id: Optional[int]
    department: Optional[str]
    topic_id: Optional[int]
    topic: Optional[str]
    user_id: Optional[int]
    user_name: str
    user_email: str
    staff_id: Optional[int]
    staff: Optional[str]
    team_id: Optional[int]
    team: Optional[str]
    sla_id: Optional[int]
    sla: Optional[str]
    created: Optional[str]
    updated: Optional[str]
    due_date: Optional[str]
    closed: Optional[str]
    is_overdue: bool
    is_answered: bool
    source: str
    ip: str
    children: List[int] = field(default_factory=list)
    thread: List[ThreadEntryDTO] = field(default_factory=list)

    @classmethod
    def from_ticket(
        cls,
        ticket: Ticket,
        directory: Directory,
        children: Optional[List[int]] = None,
    ) -> "TicketDetailDTO":
        """
        Factory method para converter ticket em DTO detalhado.

        Args:
            ticket: Registro do ticket store
            directory: Fonte dos nomes das entidades referenciadas
            children: IDs internos dos subtickets
        """
        names = _reference_names(ticket, directory)
        return cls(
            id=ticket.id,
            number=ticket.number,
            subject=ticket.subject,
            status_id=ticket.status_id,
            status=names["status"],
            priority_id=ticket.priority_id,
            priority=names["priority"],
            department_id=ticket.dept_id,
            department=names["department"],
            topic_id=ticket.topic_id,
            topic=names["topic"],
            user_id=ticket.user_id,
            user_name=ticket.user_name,
            user_email=ticket.user_email,
            staff_id=ticket.staff_id,
            staff=names["staff"],
            team_id=ticket.team_id,
            team=names["team"],
            sla_id=ticket.sla_id,
            sla=names["sla"],
            created=format_datetime(ticket.created),
            updated=format_datetime(ticket.updated),
            due_date=ticket.due_date,
            closed=format_datetime(ticket.closed) if ticket.is_closed else None,
            is_overdue=ticket.is_overdue,
            is_answered=ticket.is_answered,
            source=ticket.source,
            ip=ticket.ip,
            children=[int(child_id) for child_id in children or []],
            thread=[ThreadEntryDTO.from_entry(entry, directory) for entry in ticket.thread],
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "number": self.number,
            "subject": self.subject,
            "statusId": self.status_id,
            "status": self.status,
            "priorityId": self.priority_id,
            "priority": self.priority,
            "departmentId": self.department_id,
            "department": self.department,
            "topicId": self.topic_id,
            "topic": self.topic,
            "userId": self.user_id,
            "user": {
                "name": self.user_name,
                "email": self.user_email,
            },
            "staffId": self.staff_id,
            "staff": self.staff,
            "teamId": self.team_id,
            "team": self.team,
            "slaId": self.sla_id,
            "sla": self.sla,
            "created": self.created,
            "updated": self.updated,
            "duedate": self.due_date,
            "closed": self.closed,
            "isOverdue": self.is_overdue,
            "isAnswered": self.is_answered,
            "source": self.source,
            "ip": self.ip,
            "children": list(self.children),
            "thread": [entry.to_dict() for entry in self.thread],
        }


@dataclass
class UpdateTicketResultDTO:
    """
    Resultado de uma atualização.

    Attributes:
        number: Número do ticket atualizado
        changed_fields: Campos efetivamente alterados
        note_posted: Se uma nota interna foi postada
    """

    number: str
    changed_fields: Tuple[str, ...] = ()
    note_posted: bool = False

    @property
    def updated(self) -> bool:
        return bool(self.changed_fields) or self.note_posted

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "updated": self.updated,
            "changed_fields": list(self.changed_fields),
            "note_posted": self.note_posted,
        }


@dataclass
class PaginatedSearchResultDTO:
    """
    Página de resultados de busca, com eco dos critérios aplicados.
    """

    items: List[TicketSearchItemDTO]
    limit: int
    offset: int
    sort: str

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {
            "tickets": [item.to_dict() for item in self.items],
            "count": self.count,
            "limit": self.limit,
            "offset": self.offset,
            "sort": self.sort,
        }


@dataclass
class TicketStatusDTO:
    id: int
    name: str
    state: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "state": self.state}


# =============================================================================
# STATS DTOs
# =============================================================================

@dataclass
class DepartmentStatsDTO:
    """Contadores de um departamento."""

    total: int = 0
    open: int = 0
    closed: int = 0
    overdue: int = 0

    def count(self, is_closed: bool, is_overdue: bool) -> None:
        self.total += 1
        if is_closed:
            self.closed += 1
        else:
            self.open += 1
        if is_overdue:
            self.overdue += 1

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "open": self.open,
            "closed": self.closed,
            "overdue": self.overdue,
        }


@dataclass
class StaffDepartmentStatsDTO:
    """Contadores de um staff dentro de um departamento (sem total)."""

    open: int = 0
    closed: int = 0
    overdue: int = 0

    def count(self, is_closed: bool, is_overdue: bool) -> None:
        if is_closed:
            self.closed += 1
        else:
            self.open += 1
        if is_overdue:
            self.overdue += 1

    def to_dict(self) -> dict:
        return {"open": self.open, "closed": self.closed, "overdue": self.overdue}


@dataclass
class StaffStatsDTO:
    """
    Contadores de um membro do staff.

    ``departments`` mantém a ordem em que os departamentos apareceram.
    """

    staff_id: int
    staff_name: str
    total: int = 0
    departments: Dict[str, StaffDepartmentStatsDTO] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "total": self.total,
            "departments": {
                name: counts.to_dict() for name, counts in self.departments.items()
            },
        }


@dataclass
class StatsSnapshot:
    """
    Estatísticas agregadas de tickets.

    Attributes:
        by_department: Nome do departamento → contadores (ordem alfabética)
        by_staff: Lista ordenada pelo nome do staff
    """

    total: int = 0
    open: int = 0
    closed: int = 0
    overdue: int = 0
    by_department: Dict[str, DepartmentStatsDTO] = field(default_factory=dict)
    by_staff: List[StaffStatsDTO] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "open": self.open,
            "closed": self.closed,
            "overdue": self.overdue,
            "by_department": {
                name: counts.to_dict() for name, counts in self.by_department.items()
            },
            "by_staff": [staff.to_dict() for staff in self.by_staff],
        }

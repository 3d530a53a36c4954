"""
Ports (Interfaces) do Domínio de Tickets.

Define os contratos que os Adapters de infraestrutura devem implementar
para que o gateway consulte e altere tickets.

Tipos de Ports:
- TicketStore: leitura/escrita de registros de ticket
- Directory: dados de referência (departamentos, tópicos, status,
  SLAs, staff, times, prioridades)

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Implementações em memória (InMemoryTicketStore, InMemoryDirectory)
ficam neste módulo para testes e desenvolvimento local.
"""

from datetime import datetime
from itertools import count
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union, runtime_checkable

from .entities import (
    Department,
    HelpTopic,
    Priority,
    Sla,
    Staff,
    Team,
    Ticket,
    TicketStatus,
    ThreadEntry,
)


@runtime_checkable
class TicketStore(Protocol):
    """
    Interface para o ticket store externo.

    O store garante atomicidade por registro (``save`` de um ticket
    é uma transação), mas não há transação entre stores.

    Methods:
        lookup_by_number: Busca por número público
        lookup_by_id: Busca por ID interno
        list_all: Itera todos os tickets
        find_children_ids: IDs dos tickets cujo pid aponta para o ticket
        create: Cria ticket a partir de dados da API
        save: Persiste alterações de campos
        delete: Remove ticket, thread e vínculos de filhos
        post_note: Posta nota interna na thread
    """

    def lookup_by_number(self, number: str) -> Optional[Ticket]:
        ...

    def lookup_by_id(self, ticket_id: Union[int, str]) -> Optional[Ticket]:
        ...

    def list_all(self) -> Iterable[Ticket]:
        ...

    def find_children_ids(self, ticket: Ticket) -> List[int]:
        ...

    def create(self, data: Dict[str, Any]) -> Optional[Ticket]:
        ...

    def save(self, ticket: Ticket) -> bool:
        ...

    def delete(self, ticket: Ticket) -> None:
        ...

    def post_note(self, ticket: Ticket, content: str, title: str, format: str) -> bool:
        ...


@runtime_checkable
class Directory(Protocol):
    """
    Interface para dados de referência do helpdesk.

    Os métodos ``find_*_id_by_name`` fazem match exato (sensível a
    maiúsculas); a busca case-insensitive é responsabilidade do
    EntityResolver, que percorre as listas.
    """

    def get_department(self, dept_id: int) -> Optional[Department]:
        ...

    def list_departments(self) -> List[Department]:
        ...

    def find_department_id_by_name(self, name: str) -> Optional[int]:
        ...

    def get_topic(self, topic_id: int) -> Optional[HelpTopic]:
        ...

    def list_topics(self) -> List[HelpTopic]:
        ...

    def find_topic_id_by_name(self, name: str) -> Optional[int]:
        ...

    def get_status(self, status_id: int) -> Optional[TicketStatus]:
        ...

    def list_statuses(self) -> List[TicketStatus]:
        ...

    def get_sla(self, sla_id: int) -> Optional[Sla]:
        ...

    def list_slas(self) -> List[Sla]:
        ...

    def find_sla_id_by_name(self, name: str) -> Optional[int]:
        ...

    def lookup_staff(self, identifier: Union[int, str]) -> Optional[Staff]:
        ...

    def get_team(self, team_id: int) -> Optional[Team]:
        ...

    def get_priority(self, priority_id: int) -> Optional[Priority]:
        ...


def _as_int(value: Union[int, str, None]) -> Optional[int]:
    """Converte IDs numéricos (int ou string de dígitos) para int."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return None


class InMemoryTicketStore:
    """
    Implementação em memória do TicketStore.

    Útil para:
    - Testes unitários
    - Prototipagem
    - Desenvolvimento local

    Attributes:
        topic_departments: Roteamento tópico → departamento aplicado
            na criação (simula as regras do helpdesk)

    Example:
        store = InMemoryTicketStore()
        store.add(Ticket(id=100, number="ABC100", subject="Parent"))
        found = store.lookup_by_number("ABC100")
    """

    def __init__(
        self,
        tickets: Optional[Iterable[Ticket]] = None,
        topic_departments: Optional[Dict[int, int]] = None,
    ):
        self._tickets: Dict[int, Ticket] = {}
        self._entry_ids = count(1)
        self.topic_departments = dict(topic_departments or {})
        for ticket in tickets or []:
            self.add(ticket)

    def add(self, ticket: Ticket) -> Ticket:
        """Registra ticket existente (útil para montar cenários)."""
        self._tickets[ticket.id] = ticket
        return ticket

    def lookup_by_number(self, number: str) -> Optional[Ticket]:
        """Busca por número público."""
        wanted = str(number)
        for ticket in self._tickets.values():
            if ticket.number == wanted:
                return ticket
        return None

    def lookup_by_id(self, ticket_id: Union[int, str]) -> Optional[Ticket]:
        """Busca por ID interno."""
        key = _as_int(ticket_id)
        if key is None:
            return None
        return self._tickets.get(key)

    def list_all(self) -> List[Ticket]:
        """Lista todos os tickets, na ordem de inserção."""
        return list(self._tickets.values())

    def find_children_ids(self, ticket: Ticket) -> List[int]:
        """IDs dos tickets cujo pid aponta para o ticket."""
        return [t.id for t in self._tickets.values() if t.pid == ticket.id]

    def create(self, data: Dict[str, Any]) -> Ticket:
        """
        Cria ticket a partir dos dados da API.

        Simula o roteamento do helpdesk: o tópico pode definir o
        departamento, que depois é sobrescrito pelo gateway.
        """
        next_id = max(self._tickets, default=0) + 1
        now = datetime.now()
        dept_id = self.topic_departments.get(data.get("topic_id"), data.get("dept_id"))
        ticket = Ticket(
            id=next_id,
            number=f"{next_id:06d}",
            subject=data.get("subject", ""),
            status_id=data.get("status_id"),
            priority_id=data.get("priority_id"),
            dept_id=dept_id,
            topic_id=data.get("topic_id"),
            user_name=data.get("name", ""),
            user_email=data.get("email", ""),
            source=data.get("source", "API"),
            ip=data.get("ip", ""),
            created=now,
            updated=now,
        )
        message = data.get("message")
        if message:
            ticket.thread.append(
                ThreadEntry(
                    id=next(self._entry_ids),
                    type="M",
                    poster=ticket.user_name,
                    body=message,
                    format=data.get("format", "html"),
                    user_id=ticket.user_id,
                )
            )
        self._tickets[ticket.id] = ticket
        return ticket

    def save(self, ticket: Ticket) -> bool:
        """Persiste ticket em memória."""
        ticket.touch()
        self._tickets[ticket.id] = ticket
        return True

    def delete(self, ticket: Ticket) -> None:
        """Remove ticket e desvincula seus filhos."""
        for child in self._tickets.values():
            if child.pid == ticket.id:
                child.pid = None
        self._tickets.pop(ticket.id, None)

    def post_note(self, ticket: Ticket, content: str, title: str, format: str) -> bool:
        """Adiciona nota interna na thread."""
        ticket.thread.append(
            ThreadEntry(
                id=next(self._entry_ids),
                type="N",
                poster="API",
                body=content,
                title=title,
                format=format,
            )
        )
        ticket.touch()
        return True

    def count(self) -> int:
        return len(self._tickets)

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._tickets.clear()


class InMemoryDirectory:
    """
    Implementação em memória do Directory.

    Example:
        directory = InMemoryDirectory(
            departments=[Department(id=1, name="Support")],
            statuses=[TicketStatus(id=1, name="Open")],
        )
    """

    def __init__(
        self,
        departments: Iterable[Department] = (),
        topics: Iterable[HelpTopic] = (),
        statuses: Iterable[TicketStatus] = (),
        slas: Iterable[Sla] = (),
        staff: Iterable[Staff] = (),
        teams: Iterable[Team] = (),
        priorities: Iterable[Priority] = (),
    ):
        self._departments = {d.id: d for d in departments}
        self._topics = {t.id: t for t in topics}
        self._statuses = {s.id: s for s in statuses}
        self._slas = {s.id: s for s in slas}
        self._staff = {s.id: s for s in staff}
        self._teams = {t.id: t for t in teams}
        self._priorities = {p.id: p for p in priorities}

    # Departamentos

    def add_department(self, department: Department) -> Department:
        self._departments[department.id] = department
        return department

    def get_department(self, dept_id: int) -> Optional[Department]:
        return self._departments.get(_as_int(dept_id))

    def list_departments(self) -> List[Department]:
        return list(self._departments.values())

    def find_department_id_by_name(self, name: str) -> Optional[int]:
        for department in self._departments.values():
            if department.name == name:
                return department.id
        return None

    # Tópicos

    def add_topic(self, topic: HelpTopic) -> HelpTopic:
        self._topics[topic.id] = topic
        return topic

    def get_topic(self, topic_id: int) -> Optional[HelpTopic]:
        return self._topics.get(_as_int(topic_id))

    def list_topics(self) -> List[HelpTopic]:
        return list(self._topics.values())

    def find_topic_id_by_name(self, name: str) -> Optional[int]:
        for topic in self._topics.values():
            if topic.name == name:
                return topic.id
        return None

    # Status

    def add_status(self, status: TicketStatus) -> TicketStatus:
        self._statuses[status.id] = status
        return status

    def get_status(self, status_id: int) -> Optional[TicketStatus]:
        return self._statuses.get(_as_int(status_id))

    def list_statuses(self) -> List[TicketStatus]:
        return list(self._statuses.values())

    # SLAs

    def add_sla(self, sla: Sla) -> Sla:
        self._slas[sla.id] = sla
        return sla

    def get_sla(self, sla_id: int) -> Optional[Sla]:
        return self._slas.get(_as_int(sla_id))

    def list_slas(self) -> List[Sla]:
        return list(self._slas.values())

    def find_sla_id_by_name(self, name: str) -> Optional[int]:
        for sla in self._slas.values():
            if sla.name == name:
                return sla.id
        return None

    # Staff

    def add_staff(self, staff: Staff) -> Staff:
        self._staff[staff.id] = staff
        return staff

    def lookup_staff(self, identifier: Union[int, str]) -> Optional[Staff]:
        """Localiza staff por id, username ou email."""
        staff_id = _as_int(identifier)
        if staff_id is not None:
            return self._staff.get(staff_id)

        wanted = str(identifier).strip()
        for staff in self._staff.values():
            if staff.username == wanted:
                return staff
            if staff.email and staff.email.lower() == wanted.lower():
                return staff
        return None

    # Times e prioridades

    def add_team(self, team: Team) -> Team:
        self._teams[team.id] = team
        return team

    def get_team(self, team_id: int) -> Optional[Team]:
        return self._teams.get(_as_int(team_id))

    def add_priority(self, priority: Priority) -> Priority:
        self._priorities[priority.id] = priority
        return priority

    def get_priority(self, priority_id: int) -> Optional[Priority]:
        return self._priorities.get(_as_int(priority_id))

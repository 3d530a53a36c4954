"""
Entidades do Domínio de Tickets.

O gateway não é dono dos tickets: estas entidades espelham os
registros do ticket store externo e os dados de referência
(departamentos, tópicos, status, SLAs, staff) que o core consulta.

Entidades:
- Ticket: registro de ticket (id interno + número público)
- ThreadEntry: mensagem/nota da thread de um ticket
- Department, HelpTopic, TicketStatus, Sla, Staff, Team, Priority

Enums:
- MessageFormat: formatos aceitos para notas/mensagens
- SortField: campos de ordenação da busca
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class MessageFormat(Enum):
    """
    Formatos de mensagem aceitos.

    Aliases (case-insensitive):
        md → markdown
        plain, txt → text
    """

    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"

    @classmethod
    def try_from_string(cls, value: Optional[str]) -> Optional["MessageFormat"]:
        """
        Converte string para enum, ou None se vazio/desconhecido.
        """
        if value is None or not str(value).strip():
            return None

        aliases = {
            "markdown": cls.MARKDOWN,
            "md": cls.MARKDOWN,
            "html": cls.HTML,
            "text": cls.TEXT,
            "plain": cls.TEXT,
            "txt": cls.TEXT,
        }
        return aliases.get(str(value).strip().lower())

    @classmethod
    def allowed_list(cls) -> str:
        """Lista separada por vírgulas (para mensagens de erro)."""
        return ", ".join(fmt.value for fmt in cls)

    @property
    def requires_markdown_plugin(self) -> bool:
        return self is MessageFormat.MARKDOWN


class SortField(Enum):
    """
    Campos de ordenação da busca.

    ``created`` e ``updated`` ordenam do mais recente para o mais
    antigo; ``number`` ordena de forma ascendente.
    """

    CREATED = "created"
    UPDATED = "updated"
    NUMBER = "number"

    @property
    def descending(self) -> bool:
        return self is not SortField.NUMBER

    @classmethod
    def from_string(cls, value: Optional[str]) -> "SortField":
        """
        Converte string para enum; valores desconhecidos viram CREATED.
        """
        if value is None:
            return cls.CREATED

        aliases = {
            "created": cls.CREATED,
            "updated": cls.UPDATED,
            "update": cls.UPDATED,
            "modified": cls.UPDATED,
            "number": cls.NUMBER,
            "id": cls.NUMBER,
            "ticket_number": cls.NUMBER,
        }
        return aliases.get(str(value).strip().lower(), cls.CREATED)


@dataclass
class Department:
    """
    Departamento. Departamentos formam uma árvore via ``parent_id``.
    """

    id: int
    name: str
    parent_id: Optional[int] = None
    is_active: bool = True
    is_public: bool = True

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass
class HelpTopic:
    id: int
    name: str
    is_active: bool = True


@dataclass
class TicketStatus:
    """
    Status de ticket. Não possui conceito de ativo/inativo.

    Attributes:
        state: Estado base ("open", "closed", ...)
        sort: Ordem de exibição
    """

    id: int
    name: str
    state: str = "open"
    sort: int = 0


@dataclass
class Sla:
    id: int
    name: str
    is_active: bool = True


@dataclass
class Staff:
    """
    Membro da equipe. Pode ser localizado por id, username ou email.
    """

    id: int
    username: str
    name: str
    email: str = ""
    is_active: bool = True


@dataclass
class Team:
    id: int
    name: str


@dataclass
class Priority:
    id: int
    name: str


@dataclass
class ThreadEntry:
    """
    Entrada da thread de um ticket.

    Attributes:
        type: "M" (mensagem), "R" (resposta), "N" (nota interna)
        poster: Nome de quem postou
        staff_id: Preenchido para respostas/notas de staff
        user_id: Preenchido para mensagens do usuário
    """

    id: int
    type: str
    poster: str
    body: str
    created: datetime = field(default_factory=datetime.now)
    title: Optional[str] = None
    format: str = MessageFormat.HTML.value
    staff_id: Optional[int] = None
    user_id: Optional[int] = None


@dataclass
class Ticket:
    """
    Registro de ticket do store externo.

    Invariantes (garantidas pelo store):
    - ``id`` e ``number`` são únicos
    - ``pid`` referencia no máximo um ticket pai

    Attributes:
        id: Identificador interno numérico
        number: Número público (ex: "680285")
        pid: ID interno do ticket pai (None se não for subticket)
        closed: Momento do fechamento (None se aberto)
        due_date: Prazo normalizado "YYYY-MM-DD HH:MM:SS"
        is_overdue: Predicado de atraso mantido pelo próprio store
    """

    id: int
    number: str
    subject: str = ""
    status_id: Optional[int] = None
    priority_id: Optional[int] = None
    dept_id: Optional[int] = None
    topic_id: Optional[int] = None
    sla_id: Optional[int] = None
    staff_id: Optional[int] = None
    team_id: Optional[int] = None
    user_id: Optional[int] = None
    user_name: str = ""
    user_email: str = ""
    pid: Optional[int] = None
    created: datetime = field(default_factory=datetime.now)
    updated: datetime = field(default_factory=datetime.now)
    due_date: Optional[str] = None
    closed: Optional[datetime] = None
    is_overdue: bool = False
    is_answered: bool = False
    source: str = "API"
    ip: str = ""
    thread: List[ThreadEntry] = field(default_factory=list)

    @property
    def is_closed(self) -> bool:
        return self.closed is not None

    @property
    def is_child(self) -> bool:
        """Ticket já é subticket de outro ticket."""
        return self.pid is not None

    def touch(self) -> None:
        """Atualiza timestamp de modificação."""
        self.updated = datetime.now()

    def __repr__(self) -> str:
        return (
            f"Ticket("
            f"id={self.id}, "
            f"number='{self.number}', "
            f"subject='{self.subject[:20]}', "
            f"pid={self.pid}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, Ticket):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

"""
EntityResolver - Resolução e validação de referências enviadas pelo cliente.

O cliente pode referenciar entidades de forma "frouxa": ID numérico,
nome, ou caminho hierárquico ("Development / osTicket"). Este módulo
converte essas referências em identificadores internos verificados.

Regras gerais:
- Falhas de "não encontrado" → EntityNotFoundError (404)
- Entidade inativa / estado inválido → BusinessRuleViolationError (400)
- Valor malformado → ValidationError (400)

Todas as operações são consultas puras: nada é alterado nos stores.
"""

from datetime import datetime
import logging
from typing import Callable, Iterable, Optional, TypeVar, Union

from ticket_gateway.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ValidationError,
)
from ticket_gateway.core.shared.interfaces import PluginRegistry, active_plugin

from .entities import MessageFormat, Ticket
from .ports import Directory, TicketStore


logger = logging.getLogger(__name__)

Reference = Union[int, str]
T = TypeVar("T")

DUE_DATE_ERROR = (
    'Invalid date format for dueDate. Expected ISO 8601 format '
    '(e.g., "2025-01-31" or "2025-01-31T17:30:00")'
)
DUE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_numeric_reference(value: Reference) -> bool:
    """
    Verifica se a referência é um ID numérico.

    Aceita ``int`` (exceto bool) ou string composta só de dígitos.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


def _match_name(items: Iterable[T], name: str, get_name: Callable[[T], str]) -> Optional[T]:
    """Primeiro item cujo nome coincide, ignorando maiúsculas."""
    wanted = name.strip().lower()
    for item in items:
        if get_name(item).lower() == wanted:
            return item
    return None


class EntityResolver:
    """
    Resolve referências de departamento, tópico, status, SLA, staff,
    ticket pai, prazo e formato de mensagem.

    Attributes:
        directory: Dados de referência do helpdesk
        ticket_store: Store de tickets (para resolver ticket pai)
        plugin_registry: Registro de plugins (detecção do Markdown)
        markdown_plugin_name: Nome de registro do plugin Markdown

    Example:
        resolver = EntityResolver(directory, ticket_store)
        dept_id = resolver.resolve_department("Development / osTicket")
    """

    def __init__(
        self,
        directory: Directory,
        ticket_store: TicketStore,
        plugin_registry: Optional[PluginRegistry] = None,
        markdown_plugin_name: str = "markdown-support",
    ):
        self.directory = directory
        self.ticket_store = ticket_store
        self.plugin_registry = plugin_registry
        self.markdown_plugin_name = markdown_plugin_name

    # =========================================================================
    # Departamentos
    # =========================================================================

    def resolve_department(self, value: Reference) -> int:
        """
        Resolve e valida departamento.

        Args:
            value: ID, nome ou caminho ("Pai / Filho")

        Returns:
            ID do departamento ativo

        Raises:
            EntityNotFoundError: Se nome/caminho/ID não existe
            BusinessRuleViolationError: Se departamento inativo
        """
        dept_id = self.department_id_for(value)

        department = self.directory.get_department(dept_id)
        if department is None:
            raise EntityNotFoundError(
                "Department not found",
                entity_type="Department",
                entity_id=str(dept_id),
            )

        if not department.is_active:
            raise BusinessRuleViolationError(
                "Department is not active",
                rule="department_inactive",
            )

        return department.id

    def department_id_for(self, value: Reference) -> int:
        """
        Converte nome ou caminho em ID, sem validar existência do ID.

        IDs numéricos são devolvidos como estão.

        Raises:
            EntityNotFoundError: Se nome/caminho não encontrado
        """
        if is_numeric_reference(value):
            return int(value)

        text = str(value).strip()
        if "/" in text:
            return self._department_id_for_path(text)

        dept_id = self.directory.find_department_id_by_name(text)
        if dept_id is not None:
            return dept_id

        # Fallback case-insensitive apenas entre departamentos públicos
        public = [d for d in self.directory.list_departments() if d.is_public]
        department = _match_name(public, text, lambda d: d.name)
        if department is None:
            raise EntityNotFoundError(
                f"Department '{text}' not found",
                entity_type="Department",
            )
        return department.id

    def _department_id_for_path(self, path: str) -> int:
        """
        Percorre o caminho segmento a segmento.

        O primeiro segmento precisa ser um departamento raiz; cada
        segmento seguinte precisa ser filho direto do anterior.
        Qualquer falha invalida o caminho inteiro (sem backtracking).
        """
        segments = [segment.strip() for segment in path.split("/")]
        departments = self.directory.list_departments()

        current = None
        for segment in segments:
            parent_id = current.id if current is not None else None
            candidates = [d for d in departments if d.parent_id == parent_id]
            current = _match_name(candidates, segment, lambda d: d.name)
            if current is None:
                logger.debug(f"Caminho de departamento não resolvido: {path!r} em {segment!r}")
                raise EntityNotFoundError(
                    f"Department '{path}' not found",
                    entity_type="Department",
                )

        return current.id

    # =========================================================================
    # Tópicos, Status, SLA, Staff
    # =========================================================================

    def resolve_topic(self, value: Reference) -> int:
        """
        Resolve e valida Help Topic (ID ou nome).

        Raises:
            EntityNotFoundError: Se não existe
            BusinessRuleViolationError: Se inativo
        """
        if is_numeric_reference(value):
            topic_id = int(value)
        else:
            name = str(value).strip()
            topic_id = self.directory.find_topic_id_by_name(name)
            if topic_id is None:
                active = [t for t in self.directory.list_topics() if t.is_active]
                topic = _match_name(active, name, lambda t: t.name)
                if topic is None:
                    raise EntityNotFoundError(
                        f"Help Topic '{name}' not found",
                        entity_type="HelpTopic",
                    )
                topic_id = topic.id

        topic = self.directory.get_topic(topic_id)
        if topic is None:
            raise EntityNotFoundError("Help Topic not found", entity_type="HelpTopic")
        if not topic.is_active:
            raise BusinessRuleViolationError("Help Topic is not active", rule="topic_inactive")
        return topic.id

    def status_id_for(self, value: Reference) -> int:
        """
        Converte nome de status em ID (busca case-insensitive).

        Raises:
            EntityNotFoundError: Se nenhum status tem o nome
        """
        if is_numeric_reference(value):
            return int(value)

        name = str(value).strip()
        status = _match_name(self.directory.list_statuses(), name, lambda s: s.name)
        if status is None:
            raise EntityNotFoundError(
                f"Status '{name}' not found",
                entity_type="TicketStatus",
            )
        return status.id

    def resolve_status(self, value: Reference) -> int:
        """
        Resolve e valida status. Status não possuem flag de ativo.

        Raises:
            EntityNotFoundError: Se não existe
        """
        status_id = self.status_id_for(value)
        status = self.directory.get_status(status_id)
        if status is None:
            raise EntityNotFoundError("Status not found", entity_type="TicketStatus")
        return status.id

    def resolve_sla(self, value: Reference) -> int:
        """
        Resolve e valida SLA (ID ou nome).

        Raises:
            EntityNotFoundError: Se não existe
            BusinessRuleViolationError: Se inativo
        """
        if is_numeric_reference(value):
            sla_id = int(value)
        else:
            name = str(value).strip()
            sla_id = self.directory.find_sla_id_by_name(name)
            if sla_id is None:
                active = [s for s in self.directory.list_slas() if s.is_active]
                sla = _match_name(active, name, lambda s: s.name)
                if sla is None:
                    raise EntityNotFoundError(f"SLA '{name}' not found", entity_type="SLA")
                sla_id = sla.id

        sla = self.directory.get_sla(sla_id)
        if sla is None:
            raise EntityNotFoundError("SLA not found", entity_type="SLA")
        if not sla.is_active:
            raise BusinessRuleViolationError("SLA is not active", rule="sla_inactive")
        return sla.id

    def resolve_staff(self, value: Reference) -> int:
        """
        Resolve staff por ID, username ou email.

        Raises:
            EntityNotFoundError: Se não existe
            BusinessRuleViolationError: Se inativo
        """
        staff = self.directory.lookup_staff(value)
        if staff is None:
            raise EntityNotFoundError("Staff member not found", entity_type="Staff")
        if not staff.is_active:
            raise BusinessRuleViolationError("Staff member is not active", rule="staff_inactive")
        return staff.id

    # =========================================================================
    # Tickets
    # =========================================================================

    def find_ticket(self, value: Reference) -> Optional[Ticket]:
        """
        Localiza ticket: número público primeiro, ID interno depois.

        Returns:
            Ticket ou None
        """
        ticket = self.ticket_store.lookup_by_number(str(value).strip())
        if ticket is None:
            ticket = self.ticket_store.lookup_by_id(value)
        return ticket

    def resolve_parent_ticket(self, value: Reference) -> int:
        """
        Resolve ticket pai para vínculo de subticket.

        Returns:
            ID interno do ticket pai

        Raises:
            EntityNotFoundError: Se ticket não existe
            BusinessRuleViolationError: Se o ticket já é filho de outro
        """
        parent = self.find_ticket(value)
        if parent is None:
            raise EntityNotFoundError(
                "Parent ticket not found",
                entity_type="Ticket",
                entity_id=str(value),
            )
        if parent.is_child:
            raise BusinessRuleViolationError(
                "Parent ticket cannot be a child of another ticket",
                rule="nested_subticket",
            )
        return parent.id

    # =========================================================================
    # Prazo e formato
    # =========================================================================

    def resolve_due_date(self, value: Optional[str]) -> Optional[str]:
        """
        Normaliza prazo para "YYYY-MM-DD HH:MM:SS".

        Formatos aceitos:
        - "2025-01-31"
        - "2025-01-31T17:30:00" / "2025-01-31 17:30:00" (frações opcionais)
        - "2025-01-31T17:30:00+01:00" / "2025-01-31T17:30:00Z"

        O horário é mantido no fuso do próprio valor (sem conversão).

        Returns:
            Data normalizada, ou None para limpar o prazo

        Raises:
            ValidationError: Se formato inválido
        """
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(DUE_DATE_ERROR, field="dueDate")

        text = value.strip()
        if not text:
            return None

        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"

        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(DUE_DATE_ERROR, field="dueDate")

        return parsed.strftime(DUE_DATE_FORMAT)

    def resolve_message_format(self, value: Optional[str]) -> str:
        """
        Valida formato de mensagem/nota.

        Returns:
            Valor canônico ("markdown", "html" ou "text")

        Raises:
            ValidationError: Se vazio ou desconhecido
        """
        if value is None or not str(value).strip():
            raise ValidationError("Format cannot be empty", field="format")

        message_format = MessageFormat.try_from_string(value)
        if message_format is None:
            raise ValidationError(
                f"Invalid format. Allowed: {MessageFormat.allowed_list()}",
                field="format",
            )
        return message_format.value

    def is_markdown_supported(self) -> bool:
        """Verifica se o plugin de Markdown está presente e ativo."""
        return active_plugin(self.plugin_registry, self.markdown_plugin_name) is not None

    def negotiate_message_format(
        self,
        value: Optional[str],
        require_markdown_plugin: bool = False,
    ) -> str:
        """
        Valida o formato e aplica a política do plugin de Markdown.

        Sem o plugin ativo, "markdown" cai para "html", a menos que a
        configuração exija o plugin.

        Raises:
            ValidationError: Formato inválido, ou plugin exigido e inativo
        """
        message_format = MessageFormat(self.resolve_message_format(value))
        if not message_format.requires_markdown_plugin or self.is_markdown_supported():
            return message_format.value

        if require_markdown_plugin:
            raise ValidationError(
                "Markdown Support plugin is required but not active",
                field="format",
            )

        logger.debug("Plugin de Markdown inativo; usando formato html")
        return MessageFormat.HTML.value

"""
Event Publishers - Publicadores de Eventos de Domínio.

Implementações:
- LoggingEventPublisher: Trilha de auditoria via logging (padrão)
- InMemoryEventPublisher: Para testes

Handlers síncronos podem ser registrados por tipo de evento
(ex.: "TicketDeletedEvent"). Falha em handler é logada e não
interrompe a operação que publicou o evento.
"""

import json
import logging
from typing import Callable, Dict, List

from ticket_gateway.core.shared.events import DomainEvent
from ticket_gateway.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class _HandlerRegistry:
    """Mixin com registro e despacho de handlers por tipo de evento."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        """Registra handler para tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Erro em handler para {event.event_type}: {e}", exc_info=True)


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher que registra cada evento como linha de auditoria.

    Example:
        publisher = LoggingEventPublisher()
        publisher.publish(TicketDeletedEvent(aggregate_id="42", number="680285"))
        # [AUDIT] TicketDeletedEvent | aggregate=Ticket:42 | actor=key-1 | data={...}
    """

    def __init__(self, log_level: int = logging.INFO):
        """
        Args:
            log_level: Nível de log das linhas de auditoria
        """
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[AUDIT] {event.event_type} | "
            f"aggregate={event.aggregate_type}:{event.aggregate_id} | "
            f"actor={event.actor or '-'} | "
            f"data={json.dumps(event.to_dict()['data'], default=str)}"
        )
        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação.
    """

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna cópia dos eventos publicados."""
        return self._published_events.copy()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        """Filtra eventos por tipo."""
        return [e for e in self._published_events if e.event_type == event_type]

    def clear(self) -> None:
        """Limpa eventos armazenados."""
        self._published_events.clear()

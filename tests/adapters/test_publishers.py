"""
Testes dos Event Publishers e do Plugin Registry em memória.
"""

import logging
from unittest.mock import Mock, patch

import pytest

from ticket_gateway.adapters.events import InMemoryEventPublisher, LoggingEventPublisher
from ticket_gateway.adapters.plugins import InMemoryPluginRegistry, StaticPlugin
from ticket_gateway.core.shared.interfaces import active_plugin
from ticket_gateway.core.subtickets import SubticketLinkedEvent
from ticket_gateway.core.tickets import TicketDeletedEvent


@pytest.fixture
def deleted_event():
    return TicketDeletedEvent(
        aggregate_id="42",
        actor="key-1",
        number="680285",
        subject="Old ticket",
        affected_children=[43],
    )


class TestInMemoryEventPublisher:

    def test_publicar_e_filtrar(self, deleted_event):
        publisher = InMemoryEventPublisher()
        linked = SubticketLinkedEvent(aggregate_id="43", parent_id=42)

        publisher.publish_batch([deleted_event, linked])

        assert publisher.published_events == [deleted_event, linked]
        assert publisher.get_events_by_type("SubticketLinkedEvent") == [linked]

        publisher.clear()
        assert publisher.published_events == []

    def test_handlers_por_tipo(self, deleted_event):
        publisher = InMemoryEventPublisher()
        handler = Mock()
        other = Mock()
        publisher.register_handler("TicketDeletedEvent", handler)
        publisher.register_handler("SubticketLinkedEvent", other)

        publisher.publish(deleted_event)

        handler.assert_called_once_with(deleted_event)
        other.assert_not_called()

    def test_falha_em_handler_nao_interrompe(self, deleted_event):
        """Deve logar o erro do handler e seguir publicando."""
        publisher = InMemoryEventPublisher()
        publisher.register_handler("TicketDeletedEvent", Mock(side_effect=RuntimeError("boom")))
        after = Mock()
        publisher.register_handler("TicketDeletedEvent", after)

        publisher.publish(deleted_event)

        after.assert_called_once_with(deleted_event)
        assert publisher.published_events == [deleted_event]


class TestLoggingEventPublisher:

    def test_linha_de_auditoria(self, deleted_event):
        publisher = LoggingEventPublisher()

        with patch("ticket_gateway.adapters.events.publishers.logger") as mock_logger:
            publisher.publish(deleted_event)

        level, message = mock_logger.log.call_args[0]
        assert level == logging.INFO
        assert message.startswith(
            "[AUDIT] TicketDeletedEvent | aggregate=Ticket:42 | actor=key-1 | data="
        )
        assert '"affected_children_count": 1' in message

    def test_ator_ausente(self):
        publisher = LoggingEventPublisher(log_level=logging.WARNING)
        event = SubticketLinkedEvent(aggregate_id="43", parent_id=42)

        with patch("ticket_gateway.adapters.events.publishers.logger") as mock_logger:
            publisher.publish(event)

        level, message = mock_logger.log.call_args[0]
        assert level == logging.WARNING
        assert "| actor=- |" in message


class TestPluginRegistry:

    def test_plugin_ativo(self):
        registry = InMemoryPluginRegistry({"markdown-support": StaticPlugin()})

        assert active_plugin(registry, "markdown-support") is not None
        assert registry.get_plugin("subticket") is None

    def test_plugin_inativo_ou_ausente(self):
        plugin = StaticPlugin(active=False)
        registry = InMemoryPluginRegistry()
        registry.register("markdown-support", plugin)

        assert active_plugin(registry, "markdown-support") is None
        assert active_plugin(registry, "subticket") is None
        assert active_plugin(None, "subticket") is None

        plugin.set_active(True)
        assert active_plugin(registry, "markdown-support") is plugin

        registry.unregister("markdown-support")
        assert registry.get_plugin("markdown-support") is None

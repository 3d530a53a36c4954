"""
Testes do Container de DI e dos settings.

Coverage:
- get_container / reset_container
- Singletons compartilhados e Factories por chamada
- Valores de configuração injetados nos use cases
- build_testing_container (publisher em memória, overrides)
- settings.as_dict / configure_logging / parsing de env
"""

from unittest.mock import patch

from ticket_gateway.adapters.events import InMemoryEventPublisher, LoggingEventPublisher
from ticket_gateway.config import settings
from ticket_gateway.config.container import (
    build_testing_container,
    get_container,
    reset_container,
)
from ticket_gateway.core.subtickets import InMemoryRelationshipStore


class TestGlobalContainer:

    def test_get_container_e_singleton(self):
        assert get_container() is get_container()

    def test_reset_container(self):
        first = get_container()

        reset_container()

        assert get_container() is not first

    def test_publisher_padrao_e_de_log(self):
        assert isinstance(get_container().event_publisher(), LoggingEventPublisher)


class TestProviders:

    def test_stores_sao_singletons(self):
        container = build_testing_container()

        assert container.ticket_store() is container.ticket_store()
        assert container.directory() is container.directory()
        assert container.entity_resolver().ticket_store is container.ticket_store()

    def test_use_cases_sao_factories(self):
        container = build_testing_container()

        assert container.get_ticket_service() is not container.get_ticket_service()
        assert container.relationship_manager() is not container.relationship_manager()

    def test_configuracao_injetada(self):
        """Deve repassar overrides de configuração aos use cases."""
        container = build_testing_container(
            search_default_limit=5,
            search_max_limit=50,
            require_markdown_plugin=True,
            default_note_title="Gateway",
        )

        search = container.search_tickets_service()
        update = container.update_ticket_service()

        assert search.default_limit == 5
        assert search.max_limit == 50
        assert update.require_markdown_plugin is True
        assert update.default_note_title == "Gateway"

    def test_publisher_em_memoria_compartilhado(self):
        container = build_testing_container()

        publisher = container.event_publisher()

        assert isinstance(publisher, InMemoryEventPublisher)
        assert container.update_ticket_service().event_publisher is publisher
        assert container.relationship_manager().event_publisher is publisher

    def test_plugin_de_subtickets_registrado(self):
        container = build_testing_container(subticket_plugin_name="subtickets-v2")

        registry = container.plugin_registry()
        plugin = registry.get_plugin("subtickets-v2")

        assert isinstance(plugin, InMemoryRelationshipStore)
        assert plugin is container.relationship_store()
        assert container.relationship_manager().is_available()


class TestSettings:

    def test_as_dict(self):
        config = settings.as_dict()

        assert set(config) == {
            "require_markdown_plugin",
            "default_note_format",
            "default_note_title",
            "search_default_limit",
            "search_max_limit",
            "subticket_plugin_name",
            "markdown_plugin_name",
            "log_level",
        }

    def test_env_bool(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_FLAG", "Yes")
        assert settings._env_bool("GATEWAY_FLAG", False) is True

        monkeypatch.setenv("GATEWAY_FLAG", "off")
        assert settings._env_bool("GATEWAY_FLAG", True) is False

        monkeypatch.delenv("GATEWAY_FLAG")
        assert settings._env_bool("GATEWAY_FLAG", True) is True

    def test_env_int(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_LIMIT", "42")
        assert settings._env_int("GATEWAY_LIMIT", 20) == 42

        monkeypatch.setenv("GATEWAY_LIMIT", " ")
        assert settings._env_int("GATEWAY_LIMIT", 20) == 20

    def test_configure_logging_sobrescreve_nivel(self):
        with patch("logging.config.dictConfig") as dict_config:
            settings.configure_logging("DEBUG")

        config = dict_config.call_args[0][0]
        assert config["root"]["level"] == "DEBUG"
        assert config["loggers"]["ticket_gateway.core"]["level"] == "DEBUG"
        assert settings.LOGGING["root"]["level"] == settings.LOG_LEVEL

    def test_configure_logging_padrao(self):
        with patch("logging.config.dictConfig") as dict_config:
            settings.configure_logging()

        dict_config.assert_called_once_with(settings.LOGGING)

"""
Settings do Ticket Gateway.

Usa variáveis de ambiente (carregadas de ``.env`` via python-dotenv)
com defaults tipados. ``as_dict()`` alimenta o
``providers.Configuration`` do container.
"""

import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Carregar variáveis de ambiente
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


# =============================================================================
# Formato de mensagens / notas
# =============================================================================

# Rejeitar format=markdown quando o plugin de Markdown não está ativo.
# Desligado: o formato ainda é validado, mas cai para "html".
REQUIRE_MARKDOWN_PLUGIN = _env_bool("REQUIRE_MARKDOWN_PLUGIN", False)

DEFAULT_NOTE_FORMAT = os.getenv("DEFAULT_NOTE_FORMAT", "markdown")
DEFAULT_NOTE_TITLE = os.getenv("DEFAULT_NOTE_TITLE", "API Update")

# =============================================================================
# Busca
# =============================================================================

SEARCH_DEFAULT_LIMIT = _env_int("SEARCH_DEFAULT_LIMIT", 20)
SEARCH_MAX_LIMIT = _env_int("SEARCH_MAX_LIMIT", 100)

# =============================================================================
# Plugins
# =============================================================================

SUBTICKET_PLUGIN_NAME = os.getenv("SUBTICKET_PLUGIN_NAME", "subticket")
MARKDOWN_PLUGIN_NAME = os.getenv("MARKDOWN_PLUGIN_NAME", "markdown-support")

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "ticket_gateway.core": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "ticket_gateway.adapters": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}


def configure_logging(level: Optional[str] = None) -> None:
    """
    Aplica a configuração de logging.

    Args:
        level: Sobrescreve LOG_LEVEL para root e loggers do pacote
    """
    config = LOGGING
    if level is not None:
        config = {
            **LOGGING,
            "root": {**LOGGING["root"], "level": level},
            "loggers": {
                name: {**logger_config, "level": level}
                for name, logger_config in LOGGING["loggers"].items()
            },
        }
    logging.config.dictConfig(config)


def as_dict() -> Dict[str, Any]:
    """Configuração no formato esperado pelo container."""
    return {
        "require_markdown_plugin": REQUIRE_MARKDOWN_PLUGIN,
        "default_note_format": DEFAULT_NOTE_FORMAT,
        "default_note_title": DEFAULT_NOTE_TITLE,
        "search_default_limit": SEARCH_DEFAULT_LIMIT,
        "search_max_limit": SEARCH_MAX_LIMIT,
        "subticket_plugin_name": SUBTICKET_PLUGIN_NAME,
        "markdown_plugin_name": MARKDOWN_PLUGIN_NAME,
        "log_level": LOG_LEVEL,
    }

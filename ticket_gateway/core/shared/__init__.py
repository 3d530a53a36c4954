"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    BusinessRuleViolationError,
    AuthenticationError,
    AuthorizationError,
    EntityNotFoundError,
    ConflictError,
    ServiceUnavailableError,
    InternalError,
    http_status_for,
)
from .events import DomainEvent
from .interfaces import EventPublisher, Plugin, PluginRegistry, active_plugin

__all__ = [
    "DomainException",
    "ValidationError",
    "BusinessRuleViolationError",
    "AuthenticationError",
    "AuthorizationError",
    "EntityNotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
    "InternalError",
    "http_status_for",
    "DomainEvent",
    "EventPublisher",
    "Plugin",
    "PluginRegistry",
    "active_plugin",
]

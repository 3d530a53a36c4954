"""
Testes dos componentes compartilhados: exceções e Domain Events.
"""

import pytest

from ticket_gateway.core.shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleViolationError,
    ConflictError,
    EntityNotFoundError,
    InternalError,
    ServiceUnavailableError,
    ValidationError,
    http_status_for,
)
from ticket_gateway.core.tickets import TicketUpdatedEvent


class TestExceptions:

    @pytest.mark.parametrize("error,status", [
        (ValidationError("x"), 400),
        (BusinessRuleViolationError("x"), 400),
        (AuthenticationError(), 401),
        (AuthorizationError("x"), 403),
        (EntityNotFoundError("x"), 404),
        (ConflictError("x"), 409),
        (InternalError(), 500),
        (ServiceUnavailableError("x"), 501),
        (RuntimeError("x"), 500),
    ])
    def test_http_status_for(self, error, status):
        assert http_status_for(error) == status

    def test_validation_to_dict(self):
        error = ValidationError("Invalid child ticket number", field="child_id")

        assert error.to_dict() == {
            "error": "VALIDATION_ERROR_CHILD_ID",
            "message": "Invalid child ticket number",
            "status": 400,
            "field": "child_id",
        }
        assert str(error) == "Invalid child ticket number"

    def test_not_found_to_dict(self):
        error = EntityNotFoundError("Ticket not found", entity_type="Ticket", entity_id="7")

        data = error.to_dict()
        assert data["error"] == "ENTITY_NOT_FOUND"
        assert data["entity_type"] == "Ticket"
        assert data["entity_id"] == "7"

    def test_internal_error_mensagem_generica(self):
        assert InternalError().message == "Internal server error"


class TestDomainEvent:

    def test_aggregate_id_obrigatorio(self):
        with pytest.raises(ValueError):
            TicketUpdatedEvent(number="ABC100")

    def test_to_dict(self):
        event = TicketUpdatedEvent(
            aggregate_id=100,
            actor="key-1",
            number="ABC100",
            changed_fields=["status_id"],
        )

        data = event.to_dict()

        assert data["aggregate_id"] == "100"
        assert data["aggregate_type"] == "Ticket"
        assert data["event_type"] == "TicketUpdatedEvent"
        assert data["actor"] == "key-1"
        assert data["data"] == {
            "number": "ABC100",
            "changed_fields": ["status_id"],
            "note_posted": False,
        }

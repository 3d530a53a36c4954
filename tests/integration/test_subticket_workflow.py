"""
Testes de Integração - Fluxo completo pelo container.

Testa o fluxo completo:
    Container → Use Case / SubticketService → Stores em memória → Eventos

Todos os serviços são obtidos do TestingContainer, que compartilha
os mesmos stores (Singleton) entre as operações.
"""

from datetime import datetime

import pytest

from ticket_gateway.config.container import build_testing_container
from ticket_gateway.core.access import Credential, Permission
from ticket_gateway.core.shared.exceptions import ServiceUnavailableError
from ticket_gateway.core.tickets import (
    CreateTicketInputDTO,
    Department,
    Staff,
    Ticket,
    TicketStatus,
    UpdateTicketInputDTO,
)


pytestmark = pytest.mark.integration


@pytest.fixture
def container():
    """Container com departamento Support, status e dois tickets ligados."""
    container = build_testing_container()

    directory = container.directory()
    directory.add_department(Department(id=1, name="Support"))
    directory.add_department(Department(id=2, name="Hardware", parent_id=1))
    directory.add_status(TicketStatus(id=1, name="Open", state="open", sort=1))
    directory.add_status(TicketStatus(id=3, name="Closed", state="closed", sort=2))
    directory.add_staff(Staff(id=1, username="jdoe", name="John Doe"))

    store = container.ticket_store()
    created = datetime(2025, 1, 1)
    store.add(Ticket(id=100, number="ABC100", subject="Parent Ticket", status_id=1,
                     dept_id=1, created=created, updated=created))
    store.add(Ticket(id=200, number="ABC200", subject="Child Ticket", status_id=1,
                     dept_id=1, pid=100, created=created, updated=created))
    return container


@pytest.fixture
def credential():
    return Credential.with_permissions(*Permission, key_id="integration-key")


class TestSubticketWorkflow:
    """Cenário pai #100 / filho #200."""

    def test_listar_desvincular_e_consultar(self, container, credential):
        """Deve refletir o desvínculo em get_list e get_parent."""
        service = container.subticket_service()

        assert service.get_list(credential, 100) == {
            "children": [
                {"ticket_id": 200, "number": "ABC200", "subject": "Child Ticket", "status": "Open"},
            ],
        }

        service.unlink_child(credential, 200)

        assert service.get_list(credential, 100) == {"children": []}
        assert service.get_parent(credential, 200) == {"parent": None}

        publisher = container.event_publisher()
        assert [e.event_type for e in publisher.published_events] == ["SubticketUnlinkedEvent"]

    def test_revincular(self, container, credential):
        service = container.subticket_service()
        service.unlink_child(credential, 200)

        response = service.create_link(credential, 100, 200)

        assert response["success"] is True
        assert service.get_parent(credential, 200)["parent"]["number"] == "ABC100"

    def test_detalhe_lista_subtickets(self, container, credential):
        detail = container.get_ticket_service().execute(credential, "ABC100")

        assert detail.children == [200]

    def test_plugin_desativado(self, container, credential):
        """Deve retornar 501 quando o plugin é desativado em tempo de execução."""
        container.relationship_store().set_active(False)

        with pytest.raises(ServiceUnavailableError):
            container.subticket_service().get_list(credential, 100)


class TestTicketLifecycle:
    """Criação → atualização → busca → estatísticas → remoção."""

    @pytest.mark.slow
    def test_ciclo_completo(self, container, credential):
        create = container.create_ticket_service()
        detail = create.execute(credential, CreateTicketInputDTO(
            subject="Printer down",
            message="Floor 2",
            name="Jane Roe",
            email="jane@example.com",
            department="Support / Hardware",
            parent_ticket_number="ABC100",
        ))
        assert detail.department == "Hardware"

        result = container.update_ticket_service().execute(
            credential,
            detail.number,
            UpdateTicketInputDTO(status="Closed", staff="jdoe", note="Replaced toner"),
        )
        assert result.changed_fields == ("status_id", "staff_id")
        assert result.note_posted is True

        page = container.search_tickets_service().execute(
            credential, {"department": "Support / Hardware"}
        )
        assert [item.number for item in page.items] == [detail.number]

        stats = container.ticket_stats_service().execute(credential)
        assert stats.total == 3
        assert stats.by_department["Hardware"].total == 1
        assert [s.staff_name for s in stats.by_staff] == ["John Doe"]

        children = container.subticket_service().get_list(credential, 100)["children"]
        assert [child["ticket_id"] for child in children] == [200, detail.id]

        number = container.delete_ticket_service().execute(credential, 100)
        assert number == "ABC100"
        assert container.ticket_store().lookup_by_id(200).pid is None

        event_types = [e.event_type for e in container.event_publisher().published_events]
        assert event_types == ["TicketCreatedEvent", "TicketUpdatedEvent", "TicketDeletedEvent"]

    def test_statuses(self, container, credential):
        statuses = container.list_statuses_service().execute(credential)

        assert [s.name for s in statuses] == ["Open", "Closed"]

"""
Testes do RelationshipManager e do SubticketService.

Estratégia de Teste:
- Tickets #100, #200 e #300 no mesmo departamento
- Relationship store em memória registrado como plugin "subticket"
- Cada teste de falha verifica a mensagem exata e o status HTTP
- Combinações de falhas verificam a ORDEM das checagens

Coverage:
- create_link: validação, permissão, plugin, existência, conflitos, aninhamento
- unlink_child
- get_parent / get_list
- Sondagem única do plugin por instância
- Formato de resposta do SubticketService
"""

from unittest.mock import MagicMock, patch

import pytest

from ticket_gateway.core.access import Credential, Permission
from ticket_gateway.core.shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleViolationError,
    ConflictError,
    EntityNotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from ticket_gateway.core.subtickets import (
    InMemoryRelationshipStore,
    RelationshipManager,
    SubticketService,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def tickets(make_ticket):
    return {
        100: make_ticket(100, subject="Parent Ticket"),
        200: make_ticket(200, subject="Child Ticket"),
        300: make_ticket(300, subject="Other Ticket"),
    }


@pytest.fixture
def manager(checker, resolver, plugin_registry, event_publisher):
    return RelationshipManager(checker, resolver, plugin_registry, event_publisher)


@pytest.fixture
def subticket_credential():
    return Credential.with_permissions(Permission.MANAGE_SUBTICKETS, key_id="sub-key")


# =============================================================================
# TESTES: create_link
# =============================================================================

class TestCreateLink:
    """Testes de criação de vínculo."""

    def test_vincular_sucesso(self, manager, subticket_credential, event_publisher, tickets):
        """Deve gravar o pai no filho e publicar SubticketLinkedEvent."""
        link = manager.create_link(subticket_credential, 100, 200)

        assert tickets[200].pid == 100
        assert link.to_dict() == {
            "parent": {"ticket_id": 100, "number": "ABC100", "subject": "Parent Ticket", "status": "Open"},
            "child": {"ticket_id": 200, "number": "ABC200", "subject": "Child Ticket", "status": "Open"},
        }

        event = event_publisher.get_events_by_type("SubticketLinkedEvent")[0]
        assert event.aggregate_id == "200"
        assert event.aggregate_type == "Subticket"
        assert event.parent_number == "ABC100"
        assert event.actor == "sub-key"

    def test_ids_como_string(self, manager, subticket_credential, tickets):
        manager.create_link(subticket_credential, "100", "200")

        assert tickets[200].pid == 100

    @pytest.mark.parametrize("parent_id,child_id,message", [
        (0, 200, "Invalid parent ticket number"),
        (-1, 200, "Invalid parent ticket number"),
        ("abc", 200, "Invalid parent ticket number"),
        (None, 200, "Invalid parent ticket number"),
        (100, 0, "Invalid child ticket number"),
        (100, "x", "Invalid child ticket number"),
        (0, 0, "Invalid parent ticket number"),
    ])
    def test_ids_invalidos(self, manager, subticket_credential, parent_id, child_id, message):
        with pytest.raises(ValidationError) as exc_info:
            manager.create_link(subticket_credential, parent_id, child_id)

        assert exc_info.value.message == message
        assert exc_info.value.http_status == 400

    def test_auto_vinculo_antes_da_permissao(self, manager, no_permission_credential):
        """Deve rejeitar auto-vínculo antes de verificar permissão."""
        with pytest.raises(ValidationError) as exc_info:
            manager.create_link(no_permission_credential, 100, 100)

        assert exc_info.value.message == "Cannot link ticket to itself"

    def test_sem_credencial(self, manager, tickets):
        with pytest.raises(AuthenticationError):
            manager.create_link(None, 100, 200)

    def test_sem_permissao(self, manager, read_only_credential, tickets):
        with pytest.raises(AuthorizationError) as exc_info:
            manager.create_link(read_only_credential, 100, 200)

        assert exc_info.value.message == "API key not authorized for subticket operations"
        assert exc_info.value.http_status == 403

    def test_permissao_antes_do_plugin(self, manager, read_only_credential, plugin_registry):
        """Deve retornar 403 mesmo com o plugin ausente."""
        plugin_registry.unregister("subticket")

        with pytest.raises(AuthorizationError):
            manager.create_link(read_only_credential, 100, 200)

    def test_plugin_ausente(self, manager, subticket_credential, plugin_registry):
        """Deve retornar 501 antes de procurar os tickets."""
        plugin_registry.unregister("subticket")

        with pytest.raises(ServiceUnavailableError) as exc_info:
            manager.create_link(subticket_credential, 100, 200)

        assert exc_info.value.message == "Subticket plugin not available"
        assert exc_info.value.http_status == 501

    def test_plugin_inativo(self, manager, subticket_credential, relationship_store, tickets):
        """Deve tratar plugin inativo exatamente como ausente."""
        relationship_store.set_active(False)

        with pytest.raises(ServiceUnavailableError):
            manager.create_link(subticket_credential, 100, 200)

        assert tickets[200].pid is None

    def test_pai_inexistente(self, manager, subticket_credential, tickets):
        with pytest.raises(EntityNotFoundError) as exc_info:
            manager.create_link(subticket_credential, 999, 998)

        assert exc_info.value.message == "Parent ticket not found"

    def test_filho_inexistente(self, manager, subticket_credential, tickets):
        with pytest.raises(EntityNotFoundError) as exc_info:
            manager.create_link(subticket_credential, 100, 999)

        assert exc_info.value.message == "Child ticket not found"
        assert exc_info.value.http_status == 404

    def test_vinculo_ja_existe(self, manager, subticket_credential, tickets):
        """Criação não é idempotente: repetir é conflito."""
        manager.create_link(subticket_credential, 100, 200)

        with pytest.raises(ConflictError) as exc_info:
            manager.create_link(subticket_credential, 100, 200)

        assert exc_info.value.message == "Subticket relationship already exists"
        assert exc_info.value.http_status == 409

    def test_filho_com_outro_pai(self, manager, subticket_credential, tickets):
        manager.create_link(subticket_credential, 100, 200)

        with pytest.raises(ConflictError) as exc_info:
            manager.create_link(subticket_credential, 300, 200)

        assert exc_info.value.message == "Child ticket already has a different parent"
        assert tickets[200].pid == 100

    def test_pai_aninhado(self, manager, subticket_credential, tickets):
        """Deve rejeitar pai que já é filho (um nível de aninhamento)."""
        manager.create_link(subticket_credential, 100, 200)

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            manager.create_link(subticket_credential, 200, 300)

        assert exc_info.value.message == "Parent ticket cannot be a child of another ticket"
        assert tickets[300].pid is None

    def test_conflito_antes_do_aninhamento(self, manager, subticket_credential, tickets):
        manager.create_link(subticket_credential, 100, 200)
        manager.create_link(subticket_credential, 100, 300)

        with pytest.raises(ConflictError):
            manager.create_link(subticket_credential, 200, 300)

    def test_fora_do_escopo_de_departamento(self, manager, tickets):
        credential = Credential.with_permissions(
            Permission.MANAGE_SUBTICKETS,
            allowed_department_ids=[3],
        )

        with pytest.raises(AuthorizationError) as exc_info:
            manager.create_link(credential, 100, 200)

        assert exc_info.value.message == "Access denied to parent ticket department"

    def test_status_desconhecido_no_resumo(self, manager, subticket_credential, make_ticket, tickets):
        make_ticket(400, status_id=99)

        link = manager.create_link(subticket_credential, 100, 400)

        assert link.child.status == "Unknown"


# =============================================================================
# TESTES: unlink_child
# =============================================================================

class TestUnlinkChild:

    def test_desvincular_sucesso(self, manager, subticket_credential, event_publisher, tickets):
        manager.create_link(subticket_credential, 100, 200)

        child = manager.unlink_child(subticket_credential, 200)

        assert child.number == "ABC200"
        assert tickets[200].pid is None

        event = event_publisher.get_events_by_type("SubticketUnlinkedEvent")[0]
        assert event.parent_id == 100
        assert event.child_number == "ABC200"

    def test_filho_sem_pai(self, manager, subticket_credential, tickets):
        with pytest.raises(EntityNotFoundError) as exc_info:
            manager.unlink_child(subticket_credential, 200)

        assert exc_info.value.message == "Child has no parent to unlink"

    def test_id_invalido(self, manager, subticket_credential):
        with pytest.raises(ValidationError) as exc_info:
            manager.unlink_child(subticket_credential, "0")

        assert exc_info.value.message == "Invalid child ticket number"

    def test_filho_inexistente(self, manager, subticket_credential, tickets):
        with pytest.raises(EntityNotFoundError) as exc_info:
            manager.unlink_child(subticket_credential, 999)

        assert exc_info.value.message == "Child ticket not found"

    def test_plugin_ausente(self, manager, subticket_credential, plugin_registry, tickets):
        plugin_registry.unregister("subticket")

        with pytest.raises(ServiceUnavailableError):
            manager.unlink_child(subticket_credential, 200)


# =============================================================================
# TESTES: get_parent / get_list
# =============================================================================

class TestConsultas:

    def test_get_parent(self, manager, subticket_credential, tickets):
        manager.create_link(subticket_credential, 100, 200)

        parent = manager.get_parent(subticket_credential, 200)

        assert parent.ticket_id == 100
        assert parent.number == "ABC100"

    def test_get_parent_sem_pai(self, manager, subticket_credential, tickets):
        """Ausência de pai não é erro."""
        assert manager.get_parent(subticket_credential, 300) is None

    def test_get_parent_erros(self, manager, subticket_credential, tickets):
        with pytest.raises(ValidationError) as exc_info:
            manager.get_parent(subticket_credential, -5)
        assert exc_info.value.message == "Invalid ticket ID"

        with pytest.raises(EntityNotFoundError) as exc_info:
            manager.get_parent(subticket_credential, 999)
        assert exc_info.value.message == "Ticket not found"

    def test_get_parent_plugin_ausente_nao_e_sem_pai(
        self, manager, subticket_credential, plugin_registry, tickets
    ):
        """Plugin indisponível deve ser 501, nunca "sem pai"."""
        plugin_registry.unregister("subticket")

        with pytest.raises(ServiceUnavailableError):
            manager.get_parent(subticket_credential, 200)

    def test_get_list(self, manager, subticket_credential, tickets):
        manager.create_link(subticket_credential, 100, 300)
        manager.create_link(subticket_credential, 100, 200)

        children = manager.get_list(subticket_credential, 100)

        assert [child.ticket_id for child in children] == [200, 300]

    def test_get_list_vazia(self, manager, subticket_credential, tickets):
        assert manager.get_list(subticket_credential, 100) == []

    def test_get_list_erros(self, manager, subticket_credential, tickets):
        with pytest.raises(ValidationError) as exc_info:
            manager.get_list(subticket_credential, "abc")
        assert exc_info.value.message == "Invalid ticket number"

        with pytest.raises(EntityNotFoundError) as exc_info:
            manager.get_list(subticket_credential, 999)
        assert exc_info.value.message == "Parent ticket not found"

    def test_get_list_ignora_orfaos(
        self, checker, resolver, plugin_registry, event_publisher, subticket_credential, tickets
    ):
        """Deve ignorar IDs de filhos que não existem mais."""
        store = MagicMock()
        store.is_active.return_value = True
        store.get_children.return_value = [200, 999]
        plugin_registry.register("subticket", store)
        manager = RelationshipManager(checker, resolver, plugin_registry, event_publisher)

        children = manager.get_list(subticket_credential, 100)

        assert [child.number for child in children] == ["ABC200"]

    def test_plugin_sondado_uma_vez(self, manager, subticket_credential, plugin_registry, tickets):
        """Deve reutilizar o handle do plugin durante a vida do manager."""
        with patch.object(
            plugin_registry, "get_plugin", wraps=plugin_registry.get_plugin
        ) as get_plugin:
            manager.get_parent(subticket_credential, 200)
            manager.get_list(subticket_credential, 100)

        assert get_plugin.call_count == 1
        assert manager.is_available()


class TestInMemoryRelationshipStore:

    def test_vinculo_grava_pid(self, ticket_store, tickets):
        store = InMemoryRelationshipStore(ticket_store)

        store.create_link(tickets[100], tickets[200])

        assert store.get_parent(tickets[200]) is tickets[100]
        assert store.get_children(tickets[100]) == [200]

        store.remove_link(tickets[200])

        assert store.get_parent(tickets[200]) is None


# =============================================================================
# TESTES: SubticketService
# =============================================================================

class TestSubticketService:
    """Testes do formato de resposta."""

    @pytest.fixture
    def service(self, manager):
        return SubticketService(manager)

    def test_respostas(self, service, subticket_credential, tickets):
        created = service.create_link(subticket_credential, 100, 200)
        assert created["success"] is True
        assert created["message"] == "Subticket relationship created successfully"
        assert created["parent"]["number"] == "ABC100"
        assert created["child"]["number"] == "ABC200"

        assert service.get_parent(subticket_credential, 200)["parent"]["ticket_id"] == 100
        assert service.get_list(subticket_credential, 100) == {
            "children": [
                {"ticket_id": 200, "number": "ABC200", "subject": "Child Ticket", "status": "Open"},
            ],
        }

        removed = service.unlink_child(subticket_credential, 200)
        assert removed == {
            "success": True,
            "message": "Subticket relationship removed successfully",
            "child": {"ticket_id": 200, "number": "ABC200", "subject": "Child Ticket", "status": "Open"},
        }
        assert service.get_parent(subticket_credential, 200) == {"parent": None}

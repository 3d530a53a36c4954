"""
PermissionChecker - Avaliação de capacidades de uma credencial.

Serviço sem estado: cada resposta é função pura da credencial
e da tabela estática de permissões. Uma única instância pode ser
compartilhada por toda a aplicação (Singleton no container).
"""

from typing import List, Optional

from ticket_gateway.core.shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
)

from .credentials import Credential
from .permissions import Permission


class PermissionChecker:
    """
    Verifica permissões, incluindo cadeias de fallback.

    Example:
        checker = PermissionChecker()
        checker.require(credential, Permission.READ_TICKETS, "tickets")
    """

    def authenticate(self, credential: Optional[Credential]) -> Credential:
        """
        Garante que há uma credencial ativa.

        Raises:
            AuthenticationError: Se credencial ausente ou inativa
        """
        if credential is None or not credential.is_active:
            raise AuthenticationError()
        return credential

    def has(self, credential: Credential, permission: Permission) -> bool:
        """
        Verifica se a credencial satisfaz a permissão.

        O flag próprio tem prioridade; se ausente, a permissão de
        fallback é avaliada recursivamente.
        """
        if credential.has_flag(permission):
            return True

        fallback = permission.fallback
        if fallback is not None:
            return self.has(credential, fallback)

        return False

    def require(
        self,
        credential: Credential,
        permission: Permission,
        context: str = "",
    ) -> None:
        """
        Exige a permissão ou lança erro.

        Args:
            credential: Credencial autenticada
            permission: Permissão exigida
            context: Contexto para a mensagem (ex: "tickets")

        Raises:
            AuthorizationError: Se permissão não concedida
        """
        if not self.has(credential, permission):
            raise AuthorizationError(
                permission.unauthorized_message(context),
                permission=permission.value,
            )

    def has_any(self, credential: Credential, *permissions: Permission) -> bool:
        """Lógica OR sobre ``has``."""
        return any(self.has(credential, permission) for permission in permissions)

    def has_all(self, credential: Credential, *permissions: Permission) -> bool:
        """Lógica AND sobre ``has``."""
        return all(self.has(credential, permission) for permission in permissions)

    def granted_permissions(self, credential: Credential) -> List[Permission]:
        """Lista as permissões efetivas (com fallback) da credencial."""
        return [
            permission for permission in Permission
            if self.has(credential, permission)
        ]

    def can_access_department(
        self,
        credential: Credential,
        department_id: Optional[int],
    ) -> bool:
        """
        Verifica o escopo de departamento da credencial.

        Sem restrição configurada, o acesso é concedido. Com restrição,
        o departamento do ticket precisa estar no conjunto permitido;
        tickets sem departamento ficam fora de credenciais restritas.
        """
        if not credential.is_department_restricted:
            return True
        if department_id is None:
            return False
        return int(department_id) in credential.allowed_department_ids

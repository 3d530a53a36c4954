"""
Exceções de Domínio do Ticket Gateway.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas. Cada
exceção carrega o tipo de falha (``code``) e o status HTTP análogo
que a camada de dispatch (fora do core) deve devolver.

Hierarquia:
    DomainException (base)
    ├── ValidationError (entrada inválida - 400)
    ├── BusinessRuleViolationError (estado inválido - 400)
    ├── AuthenticationError (credencial ausente/inválida - 401)
    ├── AuthorizationError (permissão insuficiente - 403)
    ├── EntityNotFoundError (entidade não existe - 404)
    ├── ConflictError (relacionamento já existe - 409)
    ├── ServiceUnavailableError (plugin indisponível - 501)
    └── InternalError (falha inesperada - 500)
"""

from typing import Optional


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica,
    e distinguir falhas conhecidas de falhas inesperadas.

    Example:
        try:
            manager.create_link(100, 200)
        except DomainException as e:
            logger.warning(f"Erro de domínio: {e}")
    """

    http_status: int = 400

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
            "status": self.http_status,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando o valor enviado pelo cliente é malformado ou está
    fora do intervalo aceito: IDs não positivos, auto-vínculo, data
    impossível de interpretar, formato desconhecido.

    Example:
        if parent_id == child_id:
            raise ValidationError("Cannot link ticket to itself")
    """

    http_status = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio (estado inválido).

    Lançada quando a referência existe mas não pode ser usada:
    departamento/tópico/SLA/staff inativo, ou ticket pai que já
    é filho de outro ticket.

    Example:
        if not department.is_active:
            raise BusinessRuleViolationError(
                "Department is not active",
                rule="department_inactive"
            )
    """

    http_status = 400

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class AuthenticationError(DomainException):
    """
    Credencial ausente, revogada ou inválida.
    """

    http_status = 401

    def __init__(self, message: str = "API key not authorized"):
        super().__init__(message, "UNAUTHORIZED")


class AuthorizationError(DomainException):
    """
    Credencial válida sem a permissão exigida.

    Também lançada quando a restrição de departamento da
    credencial não cobre o ticket envolvido.

    Attributes:
        permission: Nome da permissão que faltou (se aplicável)
    """

    http_status = 403

    def __init__(self, message: str, permission: Optional[str] = None):
        self.permission = permission
        super().__init__(message, "FORBIDDEN")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.permission:
            result["permission"] = self.permission
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada.

    Lançada quando uma busca por ID, número, nome ou caminho não
    retorna resultado, ou quando um relacionamento esperado não existe.

    Example:
        ticket = store.lookup_by_number(number)
        if not ticket:
            raise EntityNotFoundError("Ticket not found", entity_type="Ticket")
    """

    http_status = 404

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class ConflictError(DomainException):
    """
    Conflito de estado: o relacionamento já existe.

    Lançada ao vincular um filho que já possui pai, seja o mesmo
    pai (criação não é idempotente) ou um pai diferente.
    """

    http_status = 409

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class ServiceUnavailableError(DomainException):
    """
    Capacidade externa ausente ou inativa (ex.: plugin de subtickets).

    Nunca deve ser tratada como "sem relacionamento".
    """

    http_status = 501

    def __init__(self, message: str, service: str = None):
        self.service = service
        super().__init__(message, "NOT_IMPLEMENTED")


class InternalError(DomainException):
    """
    Falha inesperada (agregação, persistência).

    A mensagem é sempre genérica; detalhes ficam apenas no log.
    """

    http_status = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, "INTERNAL_ERROR")


def http_status_for(error: Exception) -> int:
    """
    Mapeia qualquer exceção para o status HTTP análogo.

    Exceções que não são de domínio são sempre 500.
    """
    if isinstance(error, DomainException):
        return error.http_status
    return 500

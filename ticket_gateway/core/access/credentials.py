"""
Credencial apresentada pelo chamador.

A credencial é criada e revogada por um credential store externo;
o core apenas lê seus campos.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .permissions import Permission


@dataclass(frozen=True)
class Credential:
    """
    Identidade autenticada com um flag booleano por permissão.

    Imutável (frozen=True): o core nunca altera flags.

    Attributes:
        key_id: Identificador da chave de API (para logs/auditoria)
        is_active: Se a chave está ativa
        can_*: Um flag por membro de ``Permission``
        allowed_department_ids: Restrição de departamentos; None
            significa "sem restrição"

    Example:
        credential = Credential.with_permissions(
            Permission.READ_TICKETS,
            key_id="key-1",
        )
    """

    key_id: str = ""
    is_active: bool = True
    can_create_tickets: bool = False
    can_update_tickets: bool = False
    can_read_tickets: bool = False
    can_search_tickets: bool = False
    can_delete_tickets: bool = False
    can_read_stats: bool = False
    can_manage_subtickets: bool = False
    allowed_department_ids: Optional[FrozenSet[int]] = field(default=None)

    def __post_init__(self):
        if self.allowed_department_ids is not None and not isinstance(
            self.allowed_department_ids, frozenset
        ):
            object.__setattr__(
                self,
                "allowed_department_ids",
                frozenset(int(dept_id) for dept_id in self.allowed_department_ids),
            )

    def has_flag(self, permission: Permission) -> bool:
        """Flag próprio da credencial, sem considerar fallback."""
        return bool(getattr(self, permission.value, False))

    @property
    def is_department_restricted(self) -> bool:
        return self.allowed_department_ids is not None

    @classmethod
    def with_permissions(
        cls,
        *permissions: Permission,
        key_id: str = "",
        allowed_department_ids: Optional[Iterable[int]] = None,
    ) -> "Credential":
        """Factory method para montar credencial a partir de permissões."""
        flags = {permission.value: True for permission in permissions}
        return cls(
            key_id=key_id,
            allowed_department_ids=(
                frozenset(allowed_department_ids)
                if allowed_department_ids is not None
                else None
            ),
            **flags,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        """
        Constrói credencial a partir de uma linha do credential store.

        Campos desconhecidos são ignorados; flags são convertidos
        para bool (o store pode devolver 0/1).
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}

        for column in Permission.column_names():
            if column in values:
                values[column] = bool(values[column])

        if "is_active" in values:
            values["is_active"] = bool(values["is_active"])

        departments = values.get("allowed_department_ids")
        if departments is not None:
            values["allowed_department_ids"] = frozenset(int(d) for d in departments)

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_id": self.key_id,
            "is_active": self.is_active,
            **{column: getattr(self, column) for column in Permission.column_names()},
            "allowed_department_ids": (
                sorted(self.allowed_department_ids)
                if self.allowed_department_ids is not None
                else None
            ),
        }

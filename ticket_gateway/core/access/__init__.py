"""
Domínio de Acesso - Quem pode fazer o quê.

- Permission: vocabulário fixo de capacidades e fallbacks
- Credential: flags booleanos por permissão + restrição de departamento
- PermissionChecker: has/require/has_any/has_all e escopo de departamento
"""

from .permissions import Permission
from .credentials import Credential
from .checker import PermissionChecker

__all__ = [
    "Permission",
    "Credential",
    "PermissionChecker",
]

"""
SubticketService - Fachada por requisição sobre o RelationshipManager.

Converte os resultados do manager no formato de resposta da API:

    create_link  → {"success", "message", "parent", "child"}
    unlink_child → {"success", "message", "child"}
    get_parent   → {"parent": {...} | None}
    get_list     → {"children": [...]}
"""

from typing import Any, Dict

from ticket_gateway.core.access import Credential

from .manager import RelationshipManager


class SubticketService:
    """
    Example:
        service = container.subticket_service()
        service.get_list(credential, 100)
        # {"children": [{"ticket_id": 200, "number": "ABC200", ...}]}
    """

    LINK_CREATED_MESSAGE = "Subticket relationship created successfully"
    LINK_REMOVED_MESSAGE = "Subticket relationship removed successfully"

    def __init__(self, manager: RelationshipManager):
        self.manager = manager

    def create_link(self, credential: Credential, parent_id: Any, child_id: Any) -> Dict[str, Any]:
        link = self.manager.create_link(credential, parent_id, child_id)
        return {
            "success": True,
            "message": self.LINK_CREATED_MESSAGE,
            **link.to_dict(),
        }

    def unlink_child(self, credential: Credential, child_id: Any) -> Dict[str, Any]:
        child = self.manager.unlink_child(credential, child_id)
        return {
            "success": True,
            "message": self.LINK_REMOVED_MESSAGE,
            "child": child.to_dict(),
        }

    def get_parent(self, credential: Credential, child_id: Any) -> Dict[str, Any]:
        parent = self.manager.get_parent(credential, child_id)
        return {"parent": parent.to_dict() if parent is not None else None}

    def get_list(self, credential: Credential, parent_id: Any) -> Dict[str, Any]:
        children = self.manager.get_list(credential, parent_id)
        return {"children": [child.to_dict() for child in children]}

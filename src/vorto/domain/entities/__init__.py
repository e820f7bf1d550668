"""Domain entities."""

from vorto.domain.entities.namespace import Namespace
from vorto.domain.entities.role import NamespaceRole
from vorto.domain.entities.user import User
from vorto.domain.entities.user_namespace_roles import UserNamespaceRoles

__all__ = [
    "Namespace",
    "NamespaceRole",
    "User",
    "UserNamespaceRoles",
]

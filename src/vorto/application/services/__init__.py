"""Application services."""

from vorto.application.services.role_catalog import NAMESPACE_ADMIN, NamespaceRoleCatalog
from vorto.application.services.user_namespace_role_service import UserNamespaceRoleService
from vorto.application.services.user_service import UserService

__all__ = [
    "NAMESPACE_ADMIN",
    "NamespaceRoleCatalog",
    "UserNamespaceRoleService",
    "UserService",
]

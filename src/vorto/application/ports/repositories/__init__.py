"""Repository ports."""

from vorto.application.ports.repositories.namespace_repository import NamespaceRepository
from vorto.application.ports.repositories.namespace_role_repository import (
    NamespaceRoleRepository,
)
from vorto.application.ports.repositories.repository_role_repository import (
    RepositoryRoleRepository,
)
from vorto.application.ports.repositories.user_namespace_role_repository import (
    UserNamespaceRoleRepository,
)
from vorto.application.ports.repositories.user_repository import UserRepository

__all__ = [
    "NamespaceRepository",
    "NamespaceRoleRepository",
    "RepositoryRoleRepository",
    "UserNamespaceRoleRepository",
    "UserRepository",
]

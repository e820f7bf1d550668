"""User-namespace role association."""

from dataclasses import dataclass
from uuid import UUID

from vorto.domain.value_objects import RoleSet


@dataclass
class UserNamespaceRoles:
    """Roles one user holds on one namespace - at most one row per pair."""

    user_id: UUID
    namespace_id: UUID
    roles: RoleSet

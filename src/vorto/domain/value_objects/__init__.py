"""Domain value objects."""

from vorto.domain.value_objects.namespace_name import NamespaceName
from vorto.domain.value_objects.role_set import RoleSet

__all__ = [
    "NamespaceName",
    "RoleSet",
]

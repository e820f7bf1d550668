"""Namespace role catalog - name to bit value resolution."""

from collections.abc import Iterable

from vorto.application.ports.repositories import NamespaceRoleRepository
from vorto.domain.entities import NamespaceRole
from vorto.domain.exceptions import InvalidArgument, UnknownRole
from vorto.domain.value_objects import RoleSet
from vorto.domain.value_objects.role_set import MAX_ROLE_BITS

NAMESPACE_ADMIN = "namespace_admin"


class NamespaceRoleCatalog:
    """Immutable snapshot of the namespace roles known to the repository.

    The catalog is administratively mutable, so a snapshot is loaded per
    operation rather than cached for the lifetime of the process.
    """

    def __init__(self, roles: Iterable[NamespaceRole]) -> None:
        by_name: dict[str, NamespaceRole] = {}
        seen_bits = 0
        for role in roles:
            value = role.value
            if value <= 0 or value & (value - 1) or value >= 1 << MAX_ROLE_BITS:
                raise InvalidArgument(
                    f"Role [{role.name}] has value {value}, which is not a power of two"
                )
            if seen_bits & value:
                raise InvalidArgument(f"Role [{role.name}] collides on bit value {value}")
            if role.name in by_name:
                raise InvalidArgument(f"Role [{role.name}] is declared twice")
            seen_bits |= value
            by_name[role.name] = role
        self._by_name = by_name
        self._all = frozenset(by_name.values())
        self._all_mask = RoleSet(seen_bits)

    @classmethod
    async def load(cls, repository: NamespaceRoleRepository) -> "NamespaceRoleCatalog":
        return cls(await repository.list_all())

    @property
    def all_roles(self) -> frozenset[NamespaceRole]:
        return self._all

    @property
    def all_mask(self) -> RoleSet:
        return self._all_mask

    @property
    def namespace_admin(self) -> NamespaceRole:
        return self.resolve(NAMESPACE_ADMIN)

    def resolve(self, name: str) -> NamespaceRole:
        role = self._by_name.get(name)
        if role is None:
            raise UnknownRole(name)
        return role

    def contains(self, role: NamespaceRole) -> bool:
        return role in self._all

    def require(self, role: NamespaceRole | str) -> NamespaceRole:
        """Resolve a name, or check a role object against the current snapshot."""
        if isinstance(role, str):
            return self.resolve(role)
        if not self.contains(role):
            raise InvalidArgument(f"Role [{role.name}] is unknown")
        return role

    def to_mask(self, roles: Iterable[NamespaceRole | str]) -> RoleSet:
        return RoleSet.of(*(self.require(r) for r in roles))

    def to_roles(self, mask: RoleSet | int) -> frozenset[NamespaceRole]:
        if isinstance(mask, int):
            mask = RoleSet(mask)
        return frozenset(r for r in self._all if mask.has(r))

    def names(self, mask: RoleSet | int) -> list[str]:
        return sorted(r.name for r in self.to_roles(mask))

"""Bitmask-backed set of namespace roles."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vorto.domain.entities import NamespaceRole

MAX_ROLE_BITS = 63


@dataclass(frozen=True)
class RoleSet:
    """Set of roles stored as a 64-bit mask. Zero means no roles."""

    mask: int = 0

    def __post_init__(self) -> None:
        if self.mask < 0 or self.mask >= 1 << MAX_ROLE_BITS:
            raise ValueError(f"Role mask out of range: {self.mask}")

    @classmethod
    def of(cls, *roles: "NamespaceRole") -> "RoleSet":
        mask = 0
        for role in roles:
            mask |= role.value
        return cls(mask)

    def has(self, role: "NamespaceRole") -> bool:
        return (self.mask & role.value) == role.value

    def contains_all(self, other: "RoleSet") -> bool:
        """True if every bit of other is set here (an empty set is always contained)."""
        return (self.mask & other.mask) == other.mask

    def add(self, role: "NamespaceRole") -> "RoleSet":
        return RoleSet(self.mask | role.value)

    def remove(self, role: "NamespaceRole") -> "RoleSet":
        return RoleSet(self.mask & ~role.value)

    def union(self, other: "RoleSet") -> "RoleSet":
        return RoleSet(self.mask | other.mask)

    def intersection(self, other: "RoleSet") -> "RoleSet":
        return RoleSet(self.mask & other.mask)

    def __or__(self, other: "RoleSet") -> "RoleSet":
        return self.union(other)

    def __and__(self, other: "RoleSet") -> "RoleSet":
        return self.intersection(other)

    def __bool__(self) -> bool:
        return self.mask != 0

    def __int__(self) -> int:
        return self.mask

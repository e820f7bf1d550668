"""Event publisher port - fire-and-forget notifications."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol


class RoleChangeKind(StrEnum):
    """Kinds of namespace role changes."""

    ROLE_ADDED = "role_added"
    ROLE_REMOVED = "role_removed"
    ROLES_SET = "roles_set"
    ROLES_DELETED = "roles_deleted"


@dataclass(frozen=True)
class NamespaceRolesChanged:
    """Roles of a target user on a namespace were changed by an actor."""

    kind: RoleChangeKind
    actor: str
    target: str
    namespace: str
    roles: tuple[str, ...] = ()
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class EventPublisher(Protocol):
    """Port for publishing role change events. Must not raise."""

    def publish(self, event: NamespaceRolesChanged) -> None: ...

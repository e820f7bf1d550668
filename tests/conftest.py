"""Pytest fixtures for Vorto tests."""

from __future__ import annotations

import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from vorto.domain.entities import Namespace, NamespaceRole, User, UserNamespaceRoles
from vorto.domain.value_objects import RoleSet

CATALOG = [
    NamespaceRole("model_viewer", 1),
    NamespaceRole("model_creator", 2),
    NamespaceRole("model_promoter", 4),
    NamespaceRole("model_reviewer", 8),
    NamespaceRole("model_publisher", 16),
    NamespaceRole("namespace_admin", 32, privileged=True),
]
ROLE = {r.name: r for r in CATALOG}


# --- Fake repositories ---


class FakeUserRepository:
    """In-memory user repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_username(self, username: str) -> User | None:
        for user in self._by_id.values():
            if user.username == username:
                return user
        return None

    async def list_by_ids(self, user_ids: list[UUID]) -> list[User]:
        return [self._by_id[i] for i in dict.fromkeys(user_ids) if i in self._by_id]

    async def exists(self, user_id: UUID) -> bool:
        return user_id in self._by_id

    async def create(self, user: User) -> User:
        self._by_id[user.id] = user
        return user

    async def update(self, user: User) -> None:
        self._by_id[user.id] = user


class FakeNamespaceRepository:
    """In-memory namespace repository, names compared case-insensitively."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Namespace] = {}

    async def get_by_id(self, namespace_id: UUID) -> Namespace | None:
        return self._by_id.get(namespace_id)

    async def get_by_name(self, name: str) -> Namespace | None:
        for ns in self._by_id.values():
            if ns.name.lower() == name.lower():
                return ns
        return None

    async def list_by_ids(self, namespace_ids: list[UUID]) -> list[Namespace]:
        found = [self._by_id[i] for i in set(namespace_ids) if i in self._by_id]
        return sorted(found, key=lambda n: n.name)

    async def list_all(self) -> list[Namespace]:
        return sorted(self._by_id.values(), key=lambda n: n.name)

    async def exists(self, namespace_id: UUID) -> bool:
        return namespace_id in self._by_id

    async def count_owned_with_prefix(self, owner_id: UUID, prefix: str) -> int:
        return sum(
            1
            for ns in self._by_id.values()
            if ns.owner_id == owner_id and ns.name.startswith(prefix.lower())
        )

    async def create(self, namespace: Namespace) -> Namespace:
        self._by_id[namespace.id] = namespace
        return namespace

    async def delete(self, namespace_id: UUID) -> None:
        self._by_id.pop(namespace_id, None)


class FakeNamespaceRoleRepository:
    """In-memory namespace role catalog."""

    def __init__(self, roles: list[NamespaceRole] | None = None) -> None:
        self._roles = list(CATALOG if roles is None else roles)

    async def list_all(self) -> list[NamespaceRole]:
        return sorted(self._roles, key=lambda r: r.value)

    async def get_by_name(self, name: str) -> NamespaceRole | None:
        for role in self._roles:
            if role.name == name:
                return role
        return None

    def add_role(self, role: NamespaceRole) -> None:
        self._roles.append(role)


class FakeUserNamespaceRoleRepository:
    """In-memory association repository, one mask per (user, namespace)."""

    def __init__(self) -> None:
        self._masks: dict[tuple[UUID, UUID], int] = {}

    def _rows(self, role_filter: int | None):
        for (user_id, namespace_id), mask in self._masks.items():
            if role_filter and (mask & role_filter) != role_filter:
                continue
            yield UserNamespaceRoles(user_id, namespace_id, RoleSet(mask))

    async def get(self, user_id: UUID, namespace_id: UUID) -> UserNamespaceRoles | None:
        mask = self._masks.get((user_id, namespace_id))
        if mask is None:
            return None
        return UserNamespaceRoles(user_id, namespace_id, RoleSet(mask))

    async def exists(self, user_id: UUID, namespace_id: UUID) -> bool:
        return (user_id, namespace_id) in self._masks

    async def save(self, association: UserNamespaceRoles) -> UserNamespaceRoles:
        self._masks[(association.user_id, association.namespace_id)] = association.roles.mask
        return association

    async def delete(self, user_id: UUID, namespace_id: UUID) -> None:
        self._masks.pop((user_id, namespace_id), None)

    async def delete_by_namespace(self, namespace_id: UUID) -> None:
        for key in [k for k in self._masks if k[1] == namespace_id]:
            del self._masks[key]

    async def list_by_namespace(
        self, namespace_id: UUID, role_filter: int | None = None
    ) -> list[UserNamespaceRoles]:
        return [a for a in self._rows(role_filter) if a.namespace_id == namespace_id]

    async def list_by_user(
        self, user_id: UUID, role_filter: int | None = None
    ) -> list[UserNamespaceRoles]:
        return [a for a in self._rows(role_filter) if a.user_id == user_id]

    async def list_all(self, role_filter: int | None = None) -> list[UserNamespaceRoles]:
        return list(self._rows(role_filter))

    def mask(self, user_id: UUID, namespace_id: UUID) -> int | None:
        return self._masks.get((user_id, namespace_id))


class FakeRepositoryRoleRepository:
    """In-memory repository-wide roles."""

    def __init__(self) -> None:
        self._masks: dict[UUID, int] = {}

    async def get_roles(self, user_id: UUID) -> int:
        return self._masks.get(user_id, 0)

    def grant(self, user_id: UUID, mask: int) -> None:
        self._masks[user_id] = self._masks.get(user_id, 0) | mask


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.users = FakeUserRepository()
        self.namespaces = FakeNamespaceRepository()
        self.namespace_roles = FakeNamespaceRoleRepository()
        self.user_namespace_roles = FakeUserNamespaceRoleRepository()
        self.repository_roles = FakeRepositoryRoleRepository()
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    def snapshot(self) -> dict:
        return {
            "users": copy.deepcopy(self.users._by_id),
            "namespaces": copy.deepcopy(self.namespaces._by_id),
            "masks": dict(self.user_namespace_roles._masks),
        }

    def restore(self, snapshot: dict) -> None:
        self.users._by_id = snapshot["users"]
        self.namespaces._by_id = snapshot["namespaces"]
        self.user_namespace_roles._masks = snapshot["masks"]

    # helpers for arranging test data

    def add_user(self, username: str, technical_user: bool = False) -> User:
        user = User(
            id=uuid4(),
            username=username,
            auth_provider_id="GITHUB",
            created_at=datetime.now(UTC),
            technical_user=technical_user,
        )
        self.users._by_id[user.id] = user
        return user

    def add_namespace(self, name: str, owner: User, *roles: str) -> Namespace:
        namespace = Namespace(id=uuid4(), name=name, owner_id=owner.id, created_at=datetime.now(UTC))
        self.namespaces._by_id[namespace.id] = namespace
        if roles:
            self.grant(owner, namespace, *roles)
        return namespace

    def grant(self, user: User, namespace: Namespace, *roles: str) -> None:
        mask = self.user_namespace_roles._masks.get((user.id, namespace.id), 0)
        for name in roles:
            mask |= ROLE[name].value
        self.user_namespace_roles._masks[(user.id, namespace.id)] = mask


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory yielding the same UoW; restores a snapshot when the block raises."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        snapshot = uow.snapshot()
        try:
            yield uow
            await uow.commit()
        except BaseException:
            uow.restore(snapshot)
            await uow.rollback()
            raise

    return _factory


class FakeSysadminChecker:
    """Sysadmin by username."""

    def __init__(self, *usernames: str) -> None:
        self.usernames = set(usernames)

    async def is_sysadmin(self, user: User) -> bool:
        return user.username in self.usernames


class RecordingEventPublisher:
    """Collects published events."""

    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager over fake_uow with rollback."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def sysadmin_checker() -> FakeSysadminChecker:
    """Only the user named 'admin' is sysadmin."""
    return FakeSysadminChecker("admin")


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()

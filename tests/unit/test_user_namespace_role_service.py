"""Unit tests for UserNamespaceRoleService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from tests.conftest import CATALOG, ROLE
from vorto.application.ports import RoleChangeKind
from vorto.application.services import UserNamespaceRoleService
from vorto.domain.entities import NamespaceRole, User
from vorto.domain.exceptions import (
    DoesNotExist,
    InvalidArgument,
    NoAssociation,
    OperationForbidden,
    UnknownRole,
)


@pytest.fixture
def world(fake_uow):
    """alice administers com.alice, bob views it, carol is unrelated, admin is sysadmin."""
    alice = fake_uow.add_user("alice")
    bob = fake_uow.add_user("bob")
    carol = fake_uow.add_user("carol")
    admin = fake_uow.add_user("admin")
    com_alice = fake_uow.add_namespace("com.alice", alice, "namespace_admin", "model_viewer")
    fake_uow.grant(bob, com_alice, "model_viewer")
    eclipse = fake_uow.add_namespace("org.eclipse", admin, "namespace_admin")
    return {
        "alice": alice,
        "bob": bob,
        "carol": carol,
        "admin": admin,
        "com.alice": com_alice,
        "org.eclipse": eclipse,
    }


@pytest.fixture
def service(uow_factory, sysadmin_checker, event_publisher) -> UserNamespaceRoleService:
    return UserNamespaceRoleService(
        unit_of_work_factory=uow_factory,
        sysadmin_checker=sysadmin_checker,
        event_publisher=event_publisher,
    )


def _technical(username: str) -> User:
    return User(
        id=uuid4(), username=username, auth_provider_id="GITHUB", created_at=datetime.now(UTC)
    )


def mask(fake_uow, world, username: str, namespace: str) -> int | None:
    return fake_uow.user_namespace_roles.mask(world[username].id, world[namespace].id)


class TestAuthorization:
    @pytest.mark.asyncio
    async def test_namespace_admin_passes(self, service, world) -> None:
        await service.authorize_actor_as_admin_on_namespace("alice", "com.alice")

    @pytest.mark.asyncio
    async def test_sysadmin_passes_without_namespace_roles(self, service, world) -> None:
        await service.authorize_actor_as_admin_on_namespace("admin", "com.alice")

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.authorize_actor_as_admin_on_namespace("bob", "com.alice")

    @pytest.mark.asyncio
    async def test_unknown_identifiers(self, service, world) -> None:
        with pytest.raises(DoesNotExist):
            await service.authorize_actor_as_admin_on_namespace("nobody", "com.alice")
        with pytest.raises(DoesNotExist):
            await service.authorize_actor_as_admin_on_namespace("alice", "com.nowhere")

    @pytest.mark.asyncio
    async def test_entity_overload(self, service, world) -> None:
        await service.authorize_actor_as_admin_on_namespace(world["alice"], world["com.alice"])

    @pytest.mark.asyncio
    async def test_namespace_lookup_is_case_insensitive(self, service, world) -> None:
        await service.authorize_actor_as_admin_on_namespace("alice", "COM.Alice")

    @pytest.mark.asyncio
    async def test_target_or_sysadmin(self, service, world) -> None:
        await service.authorize_actor_as_target_or_sysadmin("bob", "bob")
        await service.authorize_actor_as_target_or_sysadmin("admin", "bob")
        with pytest.raises(OperationForbidden):
            await service.authorize_actor_as_target_or_sysadmin("alice", "bob")

    @pytest.mark.asyncio
    async def test_verify_can_view(self, service, world) -> None:
        await service.verify_can_view("alice", "com.alice")
        await service.verify_can_view("admin", "com.alice")
        with pytest.raises(OperationForbidden):
            await service.verify_can_view("bob", "com.alice")
        with pytest.raises(OperationForbidden):
            await service.verify_can_view("carol", "com.alice")


class TestQueries:
    @pytest.mark.asyncio
    async def test_has_role(self, service, world) -> None:
        assert await service.has_role("alice", "com.alice", "namespace_admin") is True
        assert await service.has_role("bob", "com.alice", "namespace_admin") is False
        assert await service.has_role("carol", "com.alice", "model_viewer") is False

    @pytest.mark.asyncio
    async def test_has_role_unknown_role(self, service, world) -> None:
        with pytest.raises(UnknownRole):
            await service.has_role("alice", "com.alice", "superuser")
        with pytest.raises(InvalidArgument):
            await service.has_role("alice", "com.alice", NamespaceRole("ghost", 64))

    @pytest.mark.asyncio
    async def test_get_roles(self, service, world) -> None:
        roles = await service.get_roles("alice", "com.alice")
        assert roles == {ROLE["namespace_admin"], ROLE["model_viewer"]}

    @pytest.mark.asyncio
    async def test_get_roles_without_association(self, service, world) -> None:
        with pytest.raises(NoAssociation):
            await service.get_roles("carol", "com.alice")

    @pytest.mark.asyncio
    async def test_helpers(self, service, world) -> None:
        assert await service.namespace_admin_role() == ROLE["namespace_admin"]
        assert await service.all_roles() == frozenset(CATALOG)


class TestMutations:
    @pytest.mark.asyncio
    async def test_add_then_remove_round_trip(self, service, world, fake_uow, event_publisher) -> None:
        before = mask(fake_uow, world, "bob", "com.alice")

        assert await service.add_role("alice", "bob", "com.alice", "model_creator") is True
        assert await service.add_role("alice", "bob", "com.alice", "model_creator") is False
        assert mask(fake_uow, world, "bob", "com.alice") == before | 2

        assert await service.remove_role("alice", "bob", "com.alice", "model_creator") is True
        assert await service.remove_role("alice", "bob", "com.alice", "model_creator") is False
        assert mask(fake_uow, world, "bob", "com.alice") == before

        kinds = [e.kind for e in event_publisher.events]
        assert kinds == [RoleChangeKind.ROLE_ADDED, RoleChangeKind.ROLE_REMOVED]

    @pytest.mark.asyncio
    async def test_add_creates_association(self, service, world, fake_uow) -> None:
        assert await service.add_role("alice", "carol", "com.alice", "model_reviewer") is True
        assert mask(fake_uow, world, "carol", "com.alice") == 8

    @pytest.mark.asyncio
    async def test_add_forbidden(self, service, world, fake_uow, event_publisher) -> None:
        with pytest.raises(OperationForbidden):
            await service.add_role("bob", "carol", "com.alice", "model_viewer")
        assert mask(fake_uow, world, "carol", "com.alice") is None
        assert event_publisher.events == []

    @pytest.mark.asyncio
    async def test_remove_last_role_deletes_association(self, service, world, fake_uow) -> None:
        assert await service.remove_role("alice", "bob", "com.alice", "model_viewer") is True
        assert mask(fake_uow, world, "bob", "com.alice") is None

    @pytest.mark.asyncio
    async def test_remove_without_association(self, service, world) -> None:
        assert await service.remove_role("alice", "carol", "com.alice", "model_viewer") is False

    @pytest.mark.asyncio
    async def test_set_roles(self, service, world, fake_uow) -> None:
        roles = ["model_viewer", "model_creator"]
        assert await service.set_roles("alice", "carol", "com.alice", roles) is True
        assert mask(fake_uow, world, "carol", "com.alice") == 3
        assert await service.set_roles("alice", "carol", "com.alice", reversed(roles)) is False

    @pytest.mark.asyncio
    async def test_set_empty_roles(self, service, world, fake_uow) -> None:
        assert await service.set_roles("alice", "bob", "com.alice", []) is True
        assert mask(fake_uow, world, "bob", "com.alice") is None
        assert await service.set_roles("alice", "bob", "com.alice", []) is False

    @pytest.mark.asyncio
    async def test_set_unknown_role(self, service, world, fake_uow) -> None:
        with pytest.raises(DoesNotExist):
            await service.set_roles("alice", "bob", "com.alice", ["model_viewer", "superuser"])
        assert mask(fake_uow, world, "bob", "com.alice") == 1

    @pytest.mark.asyncio
    async def test_set_all_roles(self, service, world, fake_uow) -> None:
        assert await service.set_all_roles("admin", "bob", "com.alice") is True
        assert mask(fake_uow, world, "bob", "com.alice") == 63
        namespace = await fake_uow.namespaces.get_by_name("com.alice")
        assert namespace.owner_id == world["alice"].id


class TestDeleteAllRoles:
    @pytest.mark.asyncio
    async def test_sysadmin_deletes(self, service, world, fake_uow, event_publisher) -> None:
        assert await service.delete_all_roles("admin", "bob", "com.alice") is True
        assert mask(fake_uow, world, "bob", "com.alice") is None
        assert await service.delete_all_roles("admin", "bob", "com.alice") is False
        assert [e.kind for e in event_publisher.events] == [RoleChangeKind.ROLES_DELETED]

    @pytest.mark.asyncio
    async def test_owner_deletes_own_association(self, service, world, fake_uow) -> None:
        assert await service.delete_all_roles("alice", "alice", "com.alice") is True
        assert mask(fake_uow, world, "alice", "com.alice") is None

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete_own(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.delete_all_roles("bob", "bob", "com.alice")

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_others(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.delete_all_roles("alice", "bob", "com.alice")

    @pytest.mark.asyncio
    async def test_unknown_target(self, service, world) -> None:
        with pytest.raises(DoesNotExist):
            await service.delete_all_roles("admin", "nobody", "com.alice")


class TestTechnicalUsers:
    @pytest.mark.asyncio
    async def test_create_and_add(self, service, world, fake_uow) -> None:
        user = await service.create_technical_user_and_add_as_collaborator(
            "alice", _technical("ci-bot"), "com.alice", ["model_viewer", "model_creator"]
        )

        assert user.technical_user is True
        assert user.created_by == world["alice"].id
        assert fake_uow.user_namespace_roles.mask(user.id, world["com.alice"].id) == 3

    @pytest.mark.asyncio
    async def test_forbidden_rolls_back_user(self, service, world, fake_uow) -> None:
        with pytest.raises(OperationForbidden):
            await service.create_technical_user_and_add_as_collaborator(
                "bob", _technical("ci-bot"), "com.alice", ["model_viewer"]
            )

        assert await fake_uow.users.get_by_username("ci-bot") is None
        assert fake_uow.rollbacks == 1


class TestAggregates:
    @pytest.mark.asyncio
    async def test_get_users(self, service, world) -> None:
        users = await service.get_users("alice", "com.alice")
        assert {u.username for u in users} == {"alice", "bob"}

    @pytest.mark.asyncio
    async def test_get_users_filter_needs_all_roles(self, service, world) -> None:
        admins = await service.get_users("alice", "com.alice", ["namespace_admin"])
        both = await service.get_users("alice", "com.alice", ["namespace_admin", "model_viewer"])
        none = await service.get_users("alice", "com.alice", ["model_viewer", "model_creator"])
        assert {u.username for u in admins} == {"alice"}
        assert {u.username for u in both} == {"alice"}
        assert none == set()

    @pytest.mark.asyncio
    async def test_get_users_requires_visibility(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.get_users("bob", "com.alice")

    @pytest.mark.asyncio
    async def test_get_roles_by_user_ordered(self, service, world) -> None:
        result = await service.get_roles_by_user("alice", "com.alice")
        assert [u.username for u in result] == ["alice", "bob"]
        assert result[world["bob"]] == frozenset({ROLE["model_viewer"]})

    @pytest.mark.asyncio
    async def test_get_roles_by_user_requires_admin(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.get_roles_by_user("bob", "com.alice")

    @pytest.mark.asyncio
    async def test_get_own_namespaces(self, service, world) -> None:
        namespaces = await service.get_namespaces("bob", "bob")
        assert {n.name for n in namespaces} == {"com.alice"}
        assert await service.get_namespaces("bob", "bob", ["namespace_admin"]) == set()

    @pytest.mark.asyncio
    async def test_get_namespaces_of_other_user(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.get_namespaces("alice", "bob")
        namespaces = await service.get_namespaces("admin", "alice")
        assert {n.name for n in namespaces} == {"com.alice"}

    @pytest.mark.asyncio
    async def test_sysadmin_target_sees_everything(self, service, world, fake_uow) -> None:
        fake_uow.add_namespace("com.empty", world["carol"])

        everything = await service.get_namespaces("admin", "admin")
        administered = await service.get_namespaces("admin", "admin", ["namespace_admin"])

        assert {n.name for n in everything} == {"com.alice", "com.empty", "org.eclipse"}
        assert {n.name for n in administered} == {"com.alice", "org.eclipse"}

    @pytest.mark.asyncio
    async def test_collaborators_and_roles(self, service, world) -> None:
        result = await service.get_namespaces_collaborators_and_roles("alice", "alice")
        assert [n.name for n in result] == ["com.alice"]
        collaborators = result[world["com.alice"]]
        assert {u.username for u in collaborators} == {"alice", "bob"}

    @pytest.mark.asyncio
    async def test_collaborators_and_roles_needs_admin_per_namespace(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.get_namespaces_collaborators_and_roles("bob", "bob")

    @pytest.mark.asyncio
    async def test_only_admin(self, service, world, fake_uow) -> None:
        assert await service.is_only_admin_in_any_namespace("alice", "alice") is True
        assert await service.is_only_admin_in_any_namespace("bob", "bob") is False

        fake_uow.grant(world["bob"], world["com.alice"], "namespace_admin")

        assert await service.is_only_admin_in_any_namespace("alice", "alice") is False

    @pytest.mark.asyncio
    async def test_only_admin_sysadmin_ignores_other_namespaces(
        self, service, world, fake_uow
    ) -> None:
        assert await service.is_only_admin_in_any_namespace("admin", "admin") is True

        fake_uow.grant(world["bob"], world["org.eclipse"], "namespace_admin")

        # alice stays sole admin of com.alice, where admin holds no role
        assert await service.is_only_admin_in_any_namespace("admin", "admin") is False

    @pytest.mark.asyncio
    async def test_only_admin_requires_target_or_sysadmin(self, service, world) -> None:
        with pytest.raises(OperationForbidden):
            await service.is_only_admin_in_any_namespace("bob", "alice")


class TestCollaborators:
    @pytest.mark.asyncio
    async def test_sysadmin_checker_consulted(self, uow_factory, world, fake_uow) -> None:
        checker = AsyncMock()
        checker.is_sysadmin.return_value = True
        service = UserNamespaceRoleService(uow_factory, checker)

        assert await service.add_role("carol", "carol", "com.alice", "model_viewer") is True
        checker.is_sysadmin.assert_awaited()
        assert mask(fake_uow, world, "carol", "com.alice") == 1

    @pytest.mark.asyncio
    async def test_failing_publisher_does_not_fail_operation(
        self, uow_factory, sysadmin_checker, world, fake_uow
    ) -> None:
        publisher = MagicMock()
        publisher.publish.side_effect = RuntimeError("broker down")
        service = UserNamespaceRoleService(
            uow_factory, sysadmin_checker, event_publisher=publisher
        )

        assert await service.add_role("alice", "carol", "com.alice", "model_viewer") is True
        publisher.publish.assert_called_once()
        assert fake_uow.commits == 1

"""User namespace role service - authorization and collaboration on namespaces.

Every operation accepts either resolved entities or plain identifiers
(username, namespace name, role name). Identifiers are resolved inside the
operation's unit of work; unresolvable ones raise DoesNotExist. Sysadmin
privilege always short-circuits namespace-scoped checks.
"""

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from uuid import UUID

from vorto.application.ports import (
    EventPublisher,
    NamespaceRolesChanged,
    RoleChangeKind,
    SysadminChecker,
    UnitOfWork,
)
from vorto.application.services.role_catalog import NamespaceRoleCatalog
from vorto.application.services.user_service import UserService
from vorto.domain.entities import Namespace, NamespaceRole, User, UserNamespaceRoles
from vorto.domain.exceptions import DoesNotExist, NoAssociation, OperationForbidden
from vorto.domain.value_objects import RoleSet

logger = logging.getLogger(__name__)

UserRef = User | str
NamespaceRef = Namespace | str
RoleRef = NamespaceRole | str


@dataclass
class _Session:
    """One unit of work plus the role catalog snapshot it operates on."""

    uow: UnitOfWork
    catalog: NamespaceRoleCatalog
    events: list[NamespaceRolesChanged] = field(default_factory=list)


class UserNamespaceRoleService:
    """Reports and manipulates user roles on namespaces."""

    def __init__(
        self,
        unit_of_work_factory: type,
        sysadmin_checker: SysadminChecker,
        user_service: UserService | None = None,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._sysadmin_checker = sysadmin_checker
        self._user_service = user_service or UserService()
        self._event_publisher = event_publisher

    # --- session and resolution helpers ---

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[_Session]:
        async with self._uow_factory() as uow:
            catalog = await NamespaceRoleCatalog.load(uow.namespace_roles)
            session = _Session(uow=uow, catalog=catalog)
            yield session
        # published only once the transaction committed
        for event in session.events:
            self._publish(event)

    def _publish(self, event: NamespaceRolesChanged) -> None:
        if self._event_publisher is None:
            return
        try:
            self._event_publisher.publish(event)
        except Exception:
            logger.exception("Failed to publish role change event %s", event.kind)

    @staticmethod
    async def _user(s: _Session, user: UserRef) -> User:
        if isinstance(user, User):
            return user
        found = await s.uow.users.get_by_username(user)
        if found is None:
            raise DoesNotExist("User", user)
        return found

    @staticmethod
    async def _namespace(s: _Session, namespace: NamespaceRef) -> Namespace:
        if isinstance(namespace, Namespace):
            return namespace
        found = await s.uow.namespaces.get_by_name(namespace)
        if found is None:
            raise DoesNotExist("Namespace", namespace)
        return found

    @staticmethod
    def _filter_mask(s: _Session, role_filter: Iterable[RoleRef] | None) -> int | None:
        if role_filter is None:
            return None
        return s.catalog.to_mask(role_filter).mask

    async def _users_by_ids(
        self, s: _Session, associations: list[UserNamespaceRoles]
    ) -> dict[UUID, User]:
        users = await s.uow.users.list_by_ids([a.user_id for a in associations])
        return {u.id: u for u in users}

    async def _namespaces_by_ids(
        self, s: _Session, associations: list[UserNamespaceRoles]
    ) -> set[Namespace]:
        ids = list({a.namespace_id for a in associations})
        return set(await s.uow.namespaces.list_by_ids(ids))

    # --- utility ---

    async def namespace_admin_role(self) -> NamespaceRole:
        """The namespace_admin role used in most authorization scenarios."""
        async with self._session() as s:
            return s.catalog.namespace_admin

    async def all_roles(self) -> frozenset[NamespaceRole]:
        async with self._session() as s:
            return s.catalog.all_roles

    # --- authorization ---

    async def authorize_actor_as_admin_on_namespace(
        self, actor: UserRef, namespace: NamespaceRef
    ) -> None:
        """Raise OperationForbidden unless actor is sysadmin or namespace_admin."""
        async with self._session() as s:
            await self._authorize_admin(
                s, await self._user(s, actor), await self._namespace(s, namespace)
            )

    async def _authorize_admin(self, s: _Session, actor: User, namespace: Namespace) -> None:
        if await self._sysadmin_checker.is_sysadmin(actor):
            return
        if not await self._has_role(s, actor, namespace, s.catalog.namespace_admin):
            raise OperationForbidden(
                "Acting user is not authorized to manipulate namespace roles for target "
                f"user on namespace [{namespace.name}] - aborting operation."
            )

    async def authorize_actor_as_target_or_sysadmin(self, actor: UserRef, target: UserRef) -> None:
        async with self._session() as s:
            await self._authorize_target_or_sysadmin(
                await self._user(s, actor), await self._user(s, target)
            )

    async def _authorize_target_or_sysadmin(self, actor: User, target: User) -> None:
        if actor.id == target.id:
            return
        if not await self._sysadmin_checker.is_sysadmin(actor):
            raise OperationForbidden(
                f"Acting user [{actor.username}] is neither sysadmin nor the target user."
            )

    async def verify_can_view(self, user: UserRef, namespace: NamespaceRef) -> None:
        """Sysadmins always pass; others must own the namespace and have an association."""
        async with self._session() as s:
            await self._verify_can_view(
                s, await self._user(s, user), await self._namespace(s, namespace)
            )

    async def _verify_can_view(self, s: _Session, user: User, namespace: Namespace) -> None:
        if await self._sysadmin_checker.is_sysadmin(user):
            return
        associated = await s.uow.user_namespace_roles.exists(user.id, namespace.id)
        if not namespace.is_owned_by(user.id) or not associated:
            raise OperationForbidden(
                f"User has no visibility on namespace [{namespace.name}]."
            )

    # --- queries on a single user and namespace ---

    async def has_role(self, user: UserRef, namespace: NamespaceRef, role: RoleRef) -> bool:
        async with self._session() as s:
            user_ = await self._user(s, user)
            namespace_ = await self._namespace(s, namespace)
            logger.info(
                "Verify whether user has role [%s] on namespace [%s]",
                role if isinstance(role, str) else role.name,
                namespace_.name,
            )
            return await self._has_role(s, user_, namespace_, role)

    async def _has_role(
        self, s: _Session, user: User, namespace: Namespace, role: RoleRef
    ) -> bool:
        role_ = s.catalog.require(role)
        association = await s.uow.user_namespace_roles.get(user.id, namespace.id)
        if association is None:
            return False
        return association.roles.has(role_)

    async def get_roles(self, user: UserRef, namespace: NamespaceRef) -> frozenset[NamespaceRole]:
        """Roles of user on namespace. Raises NoAssociation when the pair is unrelated."""
        async with self._session() as s:
            user_ = await self._user(s, user)
            namespace_ = await self._namespace(s, namespace)
            logger.info("Retrieving roles for user and namespace [%s]", namespace_.name)
            association = await s.uow.user_namespace_roles.get(user_.id, namespace_.id)
            if association is None:
                raise NoAssociation(user_.username, namespace_.name)
            return s.catalog.to_roles(association.roles)

    # --- role mutations ---

    async def add_role(
        self, actor: UserRef, target: UserRef, namespace: NamespaceRef, role: RoleRef
    ) -> bool:
        """Grant role. Returns False if the target already held it."""
        async with self._session() as s:
            actor_ = await self._user(s, actor)
            target_ = await self._user(s, target)
            namespace_ = await self._namespace(s, namespace)
            role_ = s.catalog.require(role)
            await self._authorize_admin(s, actor_, namespace_)

            association = await s.uow.user_namespace_roles.get(target_.id, namespace_.id)
            if association is None:
                association = UserNamespaceRoles(
                    user_id=target_.id, namespace_id=namespace_.id, roles=RoleSet.of(role_)
                )
            elif association.roles.has(role_):
                return False
            else:
                association.roles = association.roles.add(role_)
            await s.uow.user_namespace_roles.save(association)
            s.events.append(
                self._event(RoleChangeKind.ROLE_ADDED, actor_, target_, namespace_, [role_.name])
            )
            return True

    async def remove_role(
        self, actor: UserRef, target: UserRef, namespace: NamespaceRef, role: RoleRef
    ) -> bool:
        """Revoke role. Returns False if there was no association or role to remove."""
        async with self._session() as s:
            actor_ = await self._user(s, actor)
            target_ = await self._user(s, target)
            namespace_ = await self._namespace(s, namespace)
            role_ = s.catalog.require(role)
            await self._authorize_admin(s, actor_, namespace_)

            association = await s.uow.user_namespace_roles.get(target_.id, namespace_.id)
            if association is None or not association.roles.has(role_):
                return False
            association.roles = association.roles.remove(role_)
            if association.roles:
                await s.uow.user_namespace_roles.save(association)
            else:
                await s.uow.user_namespace_roles.delete(target_.id, namespace_.id)
            s.events.append(
                self._event(RoleChangeKind.ROLE_REMOVED, actor_, target_, namespace_, [role_.name])
            )
            return True

    async def set_roles(
        self,
        actor: UserRef,
        target: UserRef,
        namespace: NamespaceRef,
        roles: Iterable[RoleRef],
    ) -> bool:
        """Overwrite the target's roles. Returns False if nothing changed."""
        async with self._session() as s:
            return await self._set_roles(
                s,
                await self._user(s, actor),
                await self._user(s, target),
                await self._namespace(s, namespace),
                list(roles),
            )

    async def _set_roles(
        self,
        s: _Session,
        actor: User,
        target: User,
        namespace: Namespace,
        roles: list[RoleRef],
    ) -> bool:
        await self._authorize_admin(s, actor, namespace)
        mask = s.catalog.to_mask(roles)

        association = await s.uow.user_namespace_roles.get(target.id, namespace.id)
        current = association.roles if association else RoleSet()
        if current == mask:
            return False
        if not mask:
            await s.uow.user_namespace_roles.delete(target.id, namespace.id)
        elif association is None:
            await s.uow.user_namespace_roles.save(
                UserNamespaceRoles(user_id=target.id, namespace_id=namespace.id, roles=mask)
            )
        else:
            association.roles = mask
            await s.uow.user_namespace_roles.save(association)
        s.events.append(
            self._event(
                RoleChangeKind.ROLES_SET, actor, target, namespace, s.catalog.names(mask)
            )
        )
        return True

    async def set_all_roles(
        self, actor: UserRef, target: UserRef, namespace: NamespaceRef
    ) -> bool:
        """Grant every catalog role. Does not change namespace ownership."""
        async with self._session() as s:
            return await self._set_roles(
                s,
                await self._user(s, actor),
                await self._user(s, target),
                await self._namespace(s, namespace),
                list(s.catalog.all_roles),
            )

    async def delete_all_roles(
        self, actor: UserRef, target: UserRef, namespace: NamespaceRef
    ) -> bool:
        """Delete the target's association with the namespace entirely.

        Allowed for sysadmins, or for the target themself when they own the
        namespace. Deleting the owner's roles leaves the namespace without an
        admin relation; reassigning ownership is up to the caller.
        """
        async with self._session() as s:
            actor_ = await self._user(s, actor)
            target_ = await self._user(s, target)
            namespace_ = await self._namespace(s, namespace)

            if not await s.uow.namespaces.exists(namespace_.id):
                raise DoesNotExist("Namespace", namespace_.name)
            if not await s.uow.users.exists(actor_.id):
                raise DoesNotExist("Acting user", actor_.username)
            if not await s.uow.users.exists(target_.id):
                raise DoesNotExist("Target user", target_.username)

            if not await self._sysadmin_checker.is_sysadmin(actor_):
                if actor_.id != target_.id or not namespace_.is_owned_by(target_.id):
                    raise OperationForbidden(
                        f"Acting user cannot delete user roles for namespace [{namespace_.name}]."
                    )

            if not await s.uow.user_namespace_roles.exists(target_.id, namespace_.id):
                logger.warning("Attempting to delete non existing user namespace roles. Aborting.")
                return False

            await s.uow.user_namespace_roles.delete(target_.id, namespace_.id)
            logger.info("Deleted user-namespace role association.")
            if namespace_.is_owned_by(target_.id):
                logger.warning(
                    "Namespace [%s] lost the role association of its owner", namespace_.name
                )
            s.events.append(
                self._event(RoleChangeKind.ROLES_DELETED, actor_, target_, namespace_, [])
            )
            return True

    async def create_technical_user_and_add_as_collaborator(
        self,
        actor: UserRef,
        technical_user: User,
        namespace: NamespaceRef,
        roles: Iterable[RoleRef],
    ) -> User:
        """Persist a technical user and grant roles in one transaction.

        Authorization happens after the user is written; a failure rolls back
        the user creation as well.
        """
        async with self._session() as s:
            actor_ = await self._user(s, actor)
            namespace_ = await self._namespace(s, namespace)
            role_list = list(roles)
            s.catalog.to_mask(role_list)
            user = await self._user_service.create_or_update_technical_user(
                s.uow, technical_user, created_by=actor_.id
            )
            await self._set_roles(s, actor_, user, namespace_, role_list)
            return user

    # --- aggregate queries ---

    async def get_users(
        self,
        actor: UserRef,
        namespace: NamespaceRef,
        role_filter: Iterable[RoleRef] | None = None,
    ) -> set[User]:
        """Collaborators of namespace; with a filter, those holding all filter roles."""
        async with self._session() as s:
            actor_ = await self._user(s, actor)
            namespace_ = await self._namespace(s, namespace)
            await self._verify_can_view(s, actor_, namespace_)
            associations = await s.uow.user_namespace_roles.list_by_namespace(
                namespace_.id, role_filter=self._filter_mask(s, role_filter)
            )
            return set((await self._users_by_ids(s, associations)).values())

    async def get_roles_by_user(
        self, actor: UserRef, namespace: NamespaceRef
    ) -> dict[User, frozenset[NamespaceRole]]:
        """Collaborators with their roles, ordered by username. Requires admin."""
        async with self._session() as s:
            return await self._get_roles_by_user(
                s, await self._user(s, actor), await self._namespace(s, namespace)
            )

    async def _get_roles_by_user(
        self, s: _Session, actor: User, namespace: Namespace
    ) -> dict[User, frozenset[NamespaceRole]]:
        await self._authorize_admin(s, actor, namespace)
        associations = await s.uow.user_namespace_roles.list_by_namespace(namespace.id)
        users = await self._users_by_ids(s, associations)
        result = {
            users[a.user_id]: s.catalog.to_roles(a.roles)
            for a in associations
            if a.user_id in users
        }
        return dict(sorted(result.items(), key=lambda item: item[0].username))

    async def get_namespaces(
        self,
        actor: UserRef,
        target: UserRef,
        role_filter: Iterable[RoleRef] | None = None,
    ) -> set[Namespace]:
        """Namespaces where target collaborates; every namespace for sysadmin targets."""
        async with self._session() as s:
            return await self._get_namespaces(
                s,
                await self._user(s, actor),
                await self._user(s, target),
                self._filter_mask(s, role_filter),
            )

    async def _get_namespaces(
        self, s: _Session, actor: User, target: User, role_filter: int | None
    ) -> set[Namespace]:
        await self._authorize_target_or_sysadmin(actor, target)

        if await self._sysadmin_checker.is_sysadmin(target):
            if role_filter is None:
                return set(await s.uow.namespaces.list_all())
            associations = await s.uow.user_namespace_roles.list_all(role_filter=role_filter)
            return await self._namespaces_by_ids(s, associations)

        associations = await s.uow.user_namespace_roles.list_by_user(
            target.id, role_filter=role_filter
        )
        return await self._namespaces_by_ids(s, associations)

    async def get_namespaces_collaborators_and_roles(
        self,
        actor: UserRef,
        target: UserRef,
        role_filter: Iterable[RoleRef] | None = None,
    ) -> dict[Namespace, dict[User, frozenset[NamespaceRole]]]:
        """Per namespace of target, the collaborators and their roles."""
        async with self._session() as s:
            return await self._get_namespaces_collaborators_and_roles(
                s,
                await self._user(s, actor),
                await self._user(s, target),
                self._filter_mask(s, role_filter),
            )

    async def _get_namespaces_collaborators_and_roles(
        self, s: _Session, actor: User, target: User, role_filter: int | None
    ) -> dict[Namespace, dict[User, frozenset[NamespaceRole]]]:
        await self._authorize_target_or_sysadmin(actor, target)
        namespaces = await self._get_namespaces(s, actor, target, role_filter)
        result: dict[Namespace, dict[User, frozenset[NamespaceRole]]] = {}
        for namespace in sorted(namespaces, key=lambda n: n.name):
            result[namespace] = await self._get_roles_by_user(s, actor, namespace)
        return result

    async def is_only_admin_in_any_namespace(self, actor: UserRef, target: UserRef) -> bool:
        """True if target is the sole namespace_admin of at least one namespace."""
        async with self._session() as s:
            actor_ = await self._user(s, actor)
            target_ = await self._user(s, target)
            await self._authorize_target_or_sysadmin(actor_, target_)
            admin = s.catalog.namespace_admin
            where_admin = await s.uow.user_namespace_roles.list_by_user(
                target_.id, role_filter=RoleSet.of(admin).mask
            )
            for namespace in await self._namespaces_by_ids(s, where_admin):
                holders = await s.uow.user_namespace_roles.list_by_namespace(
                    namespace.id, role_filter=RoleSet.of(admin).mask
                )
                if [a.user_id for a in holders] == [target_.id]:
                    logger.debug(
                        "User is the only administrator of at least one namespace : [%s].",
                        namespace.name,
                    )
                    return True
            return False

    @staticmethod
    def _event(
        kind: RoleChangeKind,
        actor: User,
        target: User,
        namespace: Namespace,
        roles: list[str],
    ) -> NamespaceRolesChanged:
        return NamespaceRolesChanged(
            kind=kind,
            actor=actor.username,
            target=target.username,
            namespace=namespace.name,
            roles=tuple(roles),
        )

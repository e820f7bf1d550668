"""Create namespace use case."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from vorto.application.ports import SysadminChecker
from vorto.application.services.role_catalog import NamespaceRoleCatalog
from vorto.domain.entities import Namespace, UserNamespaceRoles
from vorto.domain.exceptions import (
    DoesNotExist,
    NamespaceConflict,
    OperationForbidden,
    ValidationError,
)
from vorto.domain.value_objects import NamespaceName

logger = logging.getLogger(__name__)


class CreateNamespaceUseCase:
    """Create namespace owned by the actor and grant them every namespace role."""

    def __init__(
        self,
        unit_of_work_factory: type,
        sysadmin_checker: SysadminChecker,
        private_prefix: str = "vorto.private.",
        private_quota: int = 1,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._sysadmin_checker = sysadmin_checker
        self._private_prefix = private_prefix.lower()
        self._private_quota = private_quota

    async def execute(self, actor_username: str, name: str) -> Namespace:
        """Create namespace. Non-sysadmins are limited to a quota of private namespaces."""
        namespace_name = NamespaceName.parse(name)

        async with self._uow_factory() as uow:
            actor = await uow.users.get_by_username(actor_username)
            if not actor:
                raise DoesNotExist("User", actor_username)

            if not await self._sysadmin_checker.is_sysadmin(actor):
                if not namespace_name.has_prefix(self._private_prefix):
                    raise ValidationError(
                        f"[{name.strip()}] is an invalid name for a private namespace "
                        "- aborting namespace creation."
                    )
                owned = await uow.namespaces.count_owned_with_prefix(
                    actor.id, self._private_prefix
                )
                if owned >= self._private_quota:
                    raise OperationForbidden(
                        f"User already has reached quota [{self._private_quota}] of private "
                        "namespaces - aborting namespace creation."
                    )

            if await uow.namespaces.get_by_name(namespace_name.value):
                raise NamespaceConflict(
                    f"Namespace [{namespace_name}] already exists - aborting namespace creation."
                )

            namespace = Namespace(
                id=uuid4(),
                name=namespace_name.value,
                owner_id=actor.id,
                created_at=datetime.now(UTC),
            )
            await uow.namespaces.create(namespace)

            catalog = await NamespaceRoleCatalog.load(uow.namespace_roles)
            await uow.user_namespace_roles.save(
                UserNamespaceRoles(
                    user_id=actor.id,
                    namespace_id=namespace.id,
                    roles=catalog.all_mask,
                )
            )
            logger.info("Created namespace [%s] owned by [%s]", namespace.name, actor.username)

        return namespace

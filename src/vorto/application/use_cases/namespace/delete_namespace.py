"""Delete namespace use case."""

import logging

from vorto.application.services.user_namespace_role_service import UserNamespaceRoleService
from vorto.domain.exceptions import DoesNotExist

logger = logging.getLogger(__name__)


class DeleteNamespaceUseCase:
    """Delete namespace and every role association on it."""

    def __init__(
        self,
        unit_of_work_factory: type,
        user_namespace_role_service: UserNamespaceRoleService,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._roles = user_namespace_role_service

    async def execute(self, actor_username: str, name: str) -> None:
        """Delete namespace. Actor must be sysadmin or namespace admin."""
        await self._roles.authorize_actor_as_admin_on_namespace(actor_username, name)

        async with self._uow_factory() as uow:
            namespace = await uow.namespaces.get_by_name(name)
            if not namespace:
                raise DoesNotExist("Namespace", name)
            await uow.user_namespace_roles.delete_by_namespace(namespace.id)
            await uow.namespaces.delete(namespace.id)
            logger.info("Deleted namespace [%s]", namespace.name)

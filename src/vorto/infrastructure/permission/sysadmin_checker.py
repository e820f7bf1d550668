"""Sysadmin checker implementation - checks the repository role mask."""

from vorto.domain.entities import User

SYSADMIN = 1


class RepositoryRoleSysadminChecker:
    """Sysadmin when the user's repository role mask has the sysadmin bit."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def is_sysadmin(self, user: User) -> bool:
        async with self._uow_factory() as uow:
            roles = await uow.repository_roles.get_roles(user.id)
            return bool(roles & SYSADMIN)

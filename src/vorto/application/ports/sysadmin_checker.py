"""Sysadmin checker port - repository-wide privilege."""

from typing import Protocol

from vorto.domain.entities import User


class SysadminChecker(Protocol):
    """Port telling whether a user holds the repository-wide sysadmin role."""

    async def is_sysadmin(self, user: User) -> bool: ...

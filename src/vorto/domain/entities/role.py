"""Namespace role entity for RBAC."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NamespaceRole:
    """Named namespace role with a power-of-two bit value."""

    name: str
    value: int
    privileged: bool = False

"""Application ports - interfaces for external adapters."""

from vorto.application.ports.event_publisher import (
    EventPublisher,
    NamespaceRolesChanged,
    RoleChangeKind,
)
from vorto.application.ports.script_eval_provider import ScriptEvalProvider
from vorto.application.ports.sysadmin_checker import SysadminChecker
from vorto.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "EventPublisher",
    "NamespaceRolesChanged",
    "RoleChangeKind",
    "ScriptEvalProvider",
    "SysadminChecker",
    "UnitOfWork",
    "UnitOfWorkFactory",
]

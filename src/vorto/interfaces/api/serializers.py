"""JSON representations of domain objects."""

from collections.abc import Iterable

from vorto.domain.entities import Namespace, NamespaceRole, User


def role_names(roles: Iterable[NamespaceRole]) -> list[str]:
    return sorted(r.name for r in roles)


def user_to_dict(user: User) -> dict:
    return {
        "username": user.username,
        "auth_provider_id": user.auth_provider_id,
        "technical_user": user.technical_user,
        "subject": user.subject,
    }


def namespace_to_dict(namespace: Namespace) -> dict:
    return {
        "name": namespace.name,
        "created_at": namespace.created_at.isoformat(),
    }


def collaborators_to_list(roles_by_user: dict[User, frozenset[NamespaceRole]]) -> list[dict]:
    return [
        {**user_to_dict(user), "roles": role_names(roles)}
        for user, roles in roles_by_user.items()
    ]

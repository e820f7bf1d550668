"""Namespace collaborator API resources."""

from datetime import UTC, datetime
from uuid import uuid4

import falcon.asgi

from vorto.application.services import UserNamespaceRoleService
from vorto.domain.entities import User
from vorto.interfaces.api.errors import bad_request, unauthorized
from vorto.interfaces.api.serializers import collaborators_to_list, user_to_dict


async def _roles_from_body(req: falcon.asgi.Request) -> list[str] | None:
    body = await req.get_media(default_when_empty=None)
    if not isinstance(body, dict):
        return None
    roles = body.get("roles")
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        return None
    return roles


class CollaboratorsResource:
    """GET /v1/namespaces/{namespace}/users - collaborators with their roles."""

    def __init__(self, service: UserNamespaceRoleService) -> None:
        self._service = service

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, namespace: str
    ) -> None:
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        roles_by_user = await self._service.get_roles_by_user(user.username, namespace)
        resp.media = {"items": collaborators_to_list(roles_by_user)}
        resp.status = falcon.HTTP_200


class CollaboratorResource:
    """PUT/DELETE /v1/namespaces/{namespace}/users/{username} - set or delete roles."""

    def __init__(self, service: UserNamespaceRoleService) -> None:
        self._service = service

    async def on_put(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        namespace: str,
        username: str,
    ) -> None:
        """Overwrite the roles of username on namespace."""
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        roles = await _roles_from_body(req)
        if roles is None:
            bad_request(resp, "Body must be {\"roles\": [role names]}")
            return
        changed = await self._service.set_roles(user.username, username, namespace, roles)
        resp.media = {"changed": changed}
        resp.status = falcon.HTTP_200

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        namespace: str,
        username: str,
    ) -> None:
        """Remove username from the collaborators of namespace."""
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        deleted = await self._service.delete_all_roles(user.username, username, namespace)
        if deleted:
            resp.status = falcon.HTTP_204
        else:
            resp.status = falcon.HTTP_404
            resp.media = {"error": f"User [{username}] has no roles on [{namespace}]"}


class TechnicalUsersResource:
    """POST /v1/namespaces/{namespace}/technical-users - create technical collaborator."""

    def __init__(self, service: UserNamespaceRoleService) -> None:
        self._service = service

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, namespace: str
    ) -> None:
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        body = await req.get_media(default_when_empty=None)
        if not isinstance(body, dict):
            bad_request(resp, "Body must be a JSON object")
            return
        try:
            username = body["username"]
            auth_provider_id = body["auth_provider_id"]
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        roles = await _roles_from_body(req)
        if roles is None:
            bad_request(resp, "Field roles must be a list of role names")
            return

        technical_user = User(
            id=uuid4(),
            username=username,
            auth_provider_id=auth_provider_id,
            created_at=datetime.now(UTC),
            technical_user=True,
            subject=body.get("subject"),
        )
        created = await self._service.create_technical_user_and_add_as_collaborator(
            user.username, technical_user, namespace, roles
        )
        resp.media = {**user_to_dict(created), "roles": sorted(roles)}
        resp.status = falcon.HTTP_201

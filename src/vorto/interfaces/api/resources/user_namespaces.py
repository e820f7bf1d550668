"""Per-user namespace API resources."""

import falcon.asgi

from vorto.application.services import UserNamespaceRoleService
from vorto.interfaces.api.errors import unauthorized
from vorto.interfaces.api.serializers import namespace_to_dict


class UserNamespacesResource:
    """GET /v1/users/{username}/namespaces?role=... - namespaces of a user."""

    def __init__(self, service: UserNamespaceRoleService) -> None:
        self._service = service

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, username: str
    ) -> None:
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        role_filter = req.get_param_as_list("role")
        namespaces = await self._service.get_namespaces(user.username, username, role_filter)
        resp.media = {
            "items": [namespace_to_dict(n) for n in sorted(namespaces, key=lambda n: n.name)]
        }
        resp.status = falcon.HTTP_200


class OnlyAdminResource:
    """GET /v1/users/{username}/only-admin - sole administrator of some namespace."""

    def __init__(self, service: UserNamespaceRoleService) -> None:
        self._service = service

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, username: str
    ) -> None:
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        only_admin = await self._service.is_only_admin_in_any_namespace(user.username, username)
        resp.media = {"only_admin": only_admin}
        resp.status = falcon.HTTP_200

"""Namespace API resources."""

import falcon.asgi

from vorto.application.use_cases.namespace.create_namespace import CreateNamespaceUseCase
from vorto.application.use_cases.namespace.delete_namespace import DeleteNamespaceUseCase
from vorto.interfaces.api.errors import unauthorized
from vorto.interfaces.api.serializers import namespace_to_dict


class NamespaceResource:
    """PUT/DELETE /v1/namespaces/{namespace} - create and delete namespaces."""

    def __init__(
        self,
        create_namespace: CreateNamespaceUseCase,
        delete_namespace: DeleteNamespaceUseCase,
    ) -> None:
        self._create = create_namespace
        self._delete = delete_namespace

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, namespace: str
    ) -> None:
        """Create namespace owned by the acting user."""
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        created = await self._create.execute(user.username, namespace)
        resp.media = namespace_to_dict(created)
        resp.status = falcon.HTTP_201

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, namespace: str
    ) -> None:
        """Delete namespace with all its role associations."""
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        await self._delete.execute(user.username, namespace)
        resp.status = falcon.HTTP_204

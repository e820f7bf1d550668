"""Payload mapping API resources."""

import falcon.asgi

from vorto.application.use_cases.mapping.map_payload import MapPayloadUseCase
from vorto.interfaces.api.errors import bad_request, unauthorized


class MappingsResource:
    """GET /v1/mappings - names of the loaded mapping specifications."""

    def __init__(self, map_payload: MapPayloadUseCase) -> None:
        self._map_payload = map_payload

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = {"items": self._map_payload.list_specifications()}
        resp.status = falcon.HTTP_200


class MappingResource:
    """POST /v1/mappings/{name} - map a JSON payload with a specification."""

    def __init__(self, map_payload: MapPayloadUseCase) -> None:
        self._map_payload = map_payload

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, name: str
    ) -> None:
        user = req.context.user
        if not user:
            unauthorized(resp)
            return
        payload = await req.get_media(default_when_empty=None)
        if payload is None:
            bad_request(resp, "Request body must be a JSON document")
            return
        result = await self._map_payload.execute(name, payload)
        resp.media = result.to_dict()
        resp.status = falcon.HTTP_200

"""Maps domain exceptions to HTTP responses."""

import logging

import falcon
import falcon.asgi

from vorto.domain.exceptions import (
    DoesNotExist,
    InvalidArgument,
    InvalidUser,
    MappingException,
    NamespaceConflict,
    OperationForbidden,
    SpecificationError,
    ValidationError,
    VortoError,
)

logger = logging.getLogger(__name__)

_STATUS = (
    (OperationForbidden, falcon.HTTP_403),
    (DoesNotExist, falcon.HTTP_404),
    (NamespaceConflict, falcon.HTTP_409),
    (MappingException, falcon.HTTP_422),
    ((ValidationError, InvalidArgument, InvalidUser, SpecificationError), falcon.HTTP_400),
)


def status_for(ex: VortoError) -> str:
    for types, status in _STATUS:
        if isinstance(ex, types):
            return status
    return falcon.HTTP_500


async def handle_vorto_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: VortoError, params
) -> None:
    """Falcon error handler for VortoError."""
    resp.status = status_for(ex)
    if resp.status == falcon.HTTP_500:
        logger.error("Unhandled domain error on %s %s", req.method, req.path, exc_info=ex)
    resp.media = {"error": str(ex)}


async def handle_unexpected_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
) -> None:
    """Falcon error handler of last resort."""
    logger.exception("Unexpected error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def unauthorized(resp: falcon.asgi.Response) -> None:
    resp.status = falcon.HTTP_401
    resp.media = {"error": "Unauthorized"}


def bad_request(resp: falcon.asgi.Response, message: str) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": message}

"""Auth middleware - resolves the acting user from a bearer token."""

from dataclasses import dataclass

import falcon.asgi


@dataclass
class RequestUser:
    """User from request context."""

    username: str
    subject: str | None = None
    email: str | None = None


class AuthMiddleware:
    """Middleware that introspects the bearer token and sets req.context.user.

    Requests without a valid token get ``req.context.user = None``; resources
    answer those with 401. Health endpoints do not look at the user.
    """

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        req.context.user = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or self._keycloak is None:
            return
        user = self._keycloak.decode_token(auth[7:])
        if user:
            req.context.user = RequestUser(
                username=user.username,
                subject=user.subject,
                email=user.email,
            )

"""Keycloak OIDC provider for token introspection."""

import logging
from dataclasses import dataclass

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

logger = logging.getLogger(__name__)


@dataclass
class OIDCUser:
    """Authenticated user from OIDC token."""

    subject: str
    username: str
    email: str | None
    realm_roles: list[str]


class KeycloakProvider:
    """Keycloak OIDC - validates tokens and extracts the username."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )

    def decode_token(self, token: str) -> OIDCUser | None:
        """Introspect token, return user info or None when inactive or invalid."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError as e:
            logger.warning("Token introspection failed: %s", e)
            return None
        if not token_info.get("active"):
            return None
        username = token_info.get("preferred_username") or token_info.get("sub")
        if not username:
            return None
        return OIDCUser(
            subject=token_info.get("sub", ""),
            username=username,
            email=token_info.get("email"),
            realm_roles=token_info.get("realm_access", {}).get("roles", []),
        )

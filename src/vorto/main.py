"""Application entry point and composition root."""

import logging

import falcon.asgi

from vorto.application.services import UserNamespaceRoleService, UserService
from vorto.application.use_cases.mapping.map_payload import MapPayloadUseCase
from vorto.application.use_cases.namespace.create_namespace import CreateNamespaceUseCase
from vorto.application.use_cases.namespace.delete_namespace import DeleteNamespaceUseCase
from vorto.config import Settings, get_settings
from vorto.domain.exceptions import VortoError
from vorto.infrastructure.auth.keycloak_provider import KeycloakProvider
from vorto.infrastructure.events.logging_event_publisher import LoggingEventPublisher
from vorto.infrastructure.mapping.spec_loader import build_engines, load_specifications
from vorto.infrastructure.permission.sysadmin_checker import RepositoryRoleSysadminChecker
from vorto.infrastructure.persistence.postgres.connection import create_pool
from vorto.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from vorto.infrastructure.sandbox import PythonScriptEvalProvider
from vorto.interfaces.api.errors import handle_unexpected_error, handle_vorto_error
from vorto.interfaces.api.middleware.auth import AuthMiddleware
from vorto.interfaces.api.middleware.cors import CORSMiddleware
from vorto.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from vorto.interfaces.api.resources.collaborators import (
    CollaboratorResource,
    CollaboratorsResource,
    TechnicalUsersResource,
)
from vorto.interfaces.api.resources.health import HealthResource
from vorto.interfaces.api.resources.mappings import MappingResource, MappingsResource
from vorto.interfaces.api.resources.namespaces import NamespaceResource
from vorto.interfaces.api.resources.user_namespaces import OnlyAdminResource, UserNamespacesResource

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level="DEBUG" if settings.debug else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_map_payload(settings: Settings) -> MapPayloadUseCase:
    """Build mapping engines from the configured specification directory."""
    if not settings.mapping_specs_dir:
        return MapPayloadUseCase({})
    provider = PythonScriptEvalProvider(
        start_method=settings.sandbox_start_method,
        startup_timeout=settings.sandbox_startup_timeout_seconds,
    )
    engines = build_engines(
        load_specifications(settings.mapping_specs_dir),
        provider,
        settings.script_timeout_seconds,
    )
    return MapPayloadUseCase(engines)


def create_vorto_app(settings: Settings | None = None):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    configure_logging(settings)
    pool = create_pool(settings.database_url)
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("No Keycloak client secret configured, all API calls are unauthorized")

    sysadmin_checker = RepositoryRoleSysadminChecker(uow_factory)
    role_service = UserNamespaceRoleService(
        unit_of_work_factory=uow_factory,
        sysadmin_checker=sysadmin_checker,
        user_service=UserService(),
        event_publisher=LoggingEventPublisher(),
    )
    create_namespace = CreateNamespaceUseCase(
        unit_of_work_factory=uow_factory,
        sysadmin_checker=sysadmin_checker,
        private_prefix=settings.private_namespace_prefix,
        private_quota=settings.private_namespace_quota,
    )
    delete_namespace = DeleteNamespaceUseCase(
        unit_of_work_factory=uow_factory,
        user_namespace_role_service=role_service,
    )
    map_payload = create_map_payload(settings)

    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app = falcon.asgi.App(
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool),
            AuthMiddleware(keycloak),
        ],
    )
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(VortoError, handle_vorto_error)

    health_resource = HealthResource(pool)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/namespaces/{namespace}", NamespaceResource(create_namespace, delete_namespace))
    app.add_route("/v1/namespaces/{namespace}/users", CollaboratorsResource(role_service))
    app.add_route(
        "/v1/namespaces/{namespace}/users/{username}", CollaboratorResource(role_service)
    )
    app.add_route(
        "/v1/namespaces/{namespace}/technical-users", TechnicalUsersResource(role_service)
    )
    app.add_route("/v1/users/{username}/namespaces", UserNamespacesResource(role_service))
    app.add_route("/v1/users/{username}/only-admin", OnlyAdminResource(role_service))
    app.add_route("/v1/mappings", MappingsResource(map_payload))
    app.add_route("/v1/mappings/{name}", MappingResource(map_payload))

    logger.info("Vorto repository v%s configured (%s)", __version__, settings.environment)
    return app


def main() -> None:
    """CLI entry point - run the API with uvicorn."""
    import uvicorn

    uvicorn.run(create_vorto_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()

"""Fixtures for API tests."""

import falcon.asgi
import pytest
from falcon.testing import TestClient

from tests.conftest import FakeSysadminChecker, FakeUnitOfWork, make_uow_factory
from vorto.application.mapping import MappingEngine
from vorto.application.services import UserNamespaceRoleService
from vorto.application.use_cases.mapping.map_payload import MapPayloadUseCase
from vorto.application.use_cases.namespace.create_namespace import CreateNamespaceUseCase
from vorto.application.use_cases.namespace.delete_namespace import DeleteNamespaceUseCase
from vorto.domain.exceptions import VortoError
from vorto.domain.mapping import FieldMapping, FieldType, MappingSpecification, SectionMapping
from vorto.interfaces.api.errors import handle_unexpected_error, handle_vorto_error
from vorto.interfaces.api.middleware.auth import RequestUser
from vorto.interfaces.api.resources.collaborators import (
    CollaboratorResource,
    CollaboratorsResource,
    TechnicalUsersResource,
)
from vorto.interfaces.api.resources.mappings import MappingResource, MappingsResource
from vorto.interfaces.api.resources.namespaces import NamespaceResource
from vorto.interfaces.api.resources.user_namespaces import OnlyAdminResource, UserNamespacesResource


class AuthBypassMiddleware:
    """Takes the acting username from the X-Test-User header."""

    async def process_request(self, req, resp):
        username = req.get_header("X-Test-User")
        req.context.user = RequestUser(username=username) if username else None


def as_user(username: str) -> dict[str, str]:
    return {"X-Test-User": username}


@pytest.fixture
def world() -> FakeUnitOfWork:
    """alice administers com.alice, bob views it, admin is sysadmin."""
    uow = FakeUnitOfWork()
    alice = uow.add_user("alice")
    bob = uow.add_user("bob")
    uow.add_user("admin")
    uow.add_user("carol")
    namespace = uow.add_namespace("com.alice", alice, "namespace_admin", "model_viewer")
    uow.grant(bob, namespace, "model_viewer")
    return uow


@pytest.fixture
def map_payload() -> MapPayloadUseCase:
    spec = MappingSpecification(
        name="thermometer",
        sections=(
            SectionMapping(
                "temperature",
                (
                    FieldMapping.from_path("value", "/t", FieldType.FLOAT),
                    FieldMapping.from_path("serial", "/serial", required=True),
                    FieldMapping.static("unit", "C"),
                ),
            ),
        ),
    )
    engine = MappingEngine.new_builder().with_specification(spec).build()
    return MapPayloadUseCase({"thermometer": engine})


@pytest.fixture
def app(world, map_payload):
    """Falcon ASGI app with API resources for testing."""
    uow_factory = make_uow_factory(world)
    sysadmin_checker = FakeSysadminChecker("admin")
    role_service = UserNamespaceRoleService(uow_factory, sysadmin_checker)
    create_namespace = CreateNamespaceUseCase(uow_factory, sysadmin_checker)
    delete_namespace = DeleteNamespaceUseCase(uow_factory, role_service)

    app = falcon.asgi.App(middleware=[AuthBypassMiddleware()])
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(VortoError, handle_vorto_error)
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
    return app


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)

"""Domain exceptions."""


class VortoError(Exception):
    """Base exception for Vorto."""

    pass


class DoesNotExist(VortoError):
    """Referenced entity (user, namespace, role, association) does not exist."""

    def __init__(self, entity: str, key: object = None) -> None:
        self.entity = entity
        self.key = key
        if key is None:
            super().__init__(f"{entity} does not exist")
        else:
            super().__init__(f"{entity} [{key}] does not exist")


class UnknownRole(DoesNotExist):
    """Role name is not part of the namespace role catalog."""

    def __init__(self, name: str) -> None:
        super().__init__("Role", name)


class NoAssociation(DoesNotExist):
    """No role association exists between the user and the namespace."""

    def __init__(self, username: str, namespace: str) -> None:
        super().__init__("User-namespace association", f"{username}@{namespace}")


class OperationForbidden(VortoError):
    """Acting user is not authorized to perform the operation."""

    pass


class InvalidArgument(VortoError):
    """Malformed argument, e.g. a stale role reference."""

    pass


class InvalidUser(VortoError):
    """User cannot be created or updated."""

    pass


class ValidationError(VortoError):
    """Validation failed for input data."""

    pass


class NamespaceConflict(VortoError):
    """Namespace with the same (case-insensitive) name already exists."""

    pass


class SpecificationError(VortoError):
    """Mapping specification is malformed."""

    pass


class MappingException(VortoError):
    """Mapping a payload failed; no partial result is produced."""

    pass


class MissingRequiredField(MappingException):
    """A field declared as required could not be resolved from the input."""

    def __init__(self, section: str, field: str) -> None:
        self.section = section
        self.field = field
        super().__init__(f"Required field [{section}.{field}] is missing from the input")

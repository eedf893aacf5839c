"""Registry error taxonomy.

Every failure the registry reports is one of these. The HTTP layer maps
them to status codes; everything else reaches the caller unchanged.
"""
from typing import Any


class RegistryError(Exception):
    """Base class for registry errors.

    - code: stable machine-readable string
    - status_code: HTTP status used by the API layer
    """

    status_code: int = 500
    code: str = "registry_error"

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class InvalidInput(RegistryError):
    """Missing or empty identity field, or an unsupported schema type."""
    status_code = 400
    code = "invalid_input"


class NotFound(RegistryError):
    """No live record matches the id or identity."""
    status_code = 404
    code = "not_found"


class ConstraintViolation(RegistryError):
    """The (name, type, version) uniqueness constraint rejected an insert."""
    status_code = 409
    code = "constraint_violation"


class StorageUnavailable(RegistryError):
    """Connection, pool or transport failure. Safe for the caller to retry."""
    status_code = 503
    code = "storage_unavailable"

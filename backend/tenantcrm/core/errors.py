class ServiceError(Exception):
    """Base class for service-layer failures that map onto an HTTP response.

    Each subclass pins an HTTP ``status_code`` and a stable ``error_code``
    that clients can branch on without parsing the message.
    """

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(self, message: str, *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class ValidationError(ServiceError):
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(ServiceError):
    """Missing, malformed, expired or otherwise unusable credentials."""

    status_code = 401
    error_code = "unauthorized"


class ForbiddenError(ServiceError):
    """Valid identity acting outside its tenant or role scope."""

    status_code = 403
    error_code = "forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    error_code = "not_found"


class ConflictError(ServiceError):
    status_code = 409
    error_code = "conflict"


class TenantBootstrapError(ServiceError):
    """Provisioning a tenant failed part-way and was rolled back; safe to retry."""

    status_code = 503
    error_code = "bootstrap_failed"


__all__ = [
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "ServiceError",
    "TenantBootstrapError",
    "ValidationError",
]

"""Error taxonomy shared by the store, the services and the HTTP layer.

Every failure the core reports is one of the four kinds below. None of them
is transient, so callers should not retry without changing their input.
"""


class PortalError(Exception):
    code = "portal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(PortalError):
    """The referenced document or notification does not exist."""

    code = "not_found"


class InvalidTransition(PortalError):
    """The document's current status does not allow the requested change."""

    code = "invalid_transition"


class ValidationError(PortalError):
    """A required field is missing or a value is out of range."""

    code = "validation_error"


class Unauthorized(PortalError):
    """The acting identity may not perform the requested mutation."""

    code = "unauthorized"

"""Gateway error taxonomy.

Every failure inside a gateway is converted to one of these before it
leaves the gateway. The HTTP layer renders them with to_dict() and
status_code.
"""

from typing import Any


class GatewayError(Exception):
    """Base exception for failures surfaced to gateway callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body for this failure."""
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(GatewayError):
    """Client supplied malformed or missing request data."""

    status_code = 400
    default_message = "Invalid request"


class Misconfigured(GatewayError):
    """A required credential is absent."""

    status_code = 500
    default_message = "Service not configured"


class UpstreamError(GatewayError):
    """The external provider answered with a failure status."""

    status_code = 500
    default_message = "Server error"


class NoUpstreamResponse(GatewayError):
    """The external provider could not be reached."""

    status_code = 502
    default_message = "No response from server"


class InternalError(GatewayError):
    """Unexpected local fault."""

    status_code = 500
    default_message = "Internal server error"

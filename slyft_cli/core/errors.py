"""Error taxonomy shared by every layer."""

from typing import Any

HTTP_UNAUTHORIZED = 401


class CLIError(Exception):
    """Base error class for CLI errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CLIError):
    """Talking to the backend failed; ``status`` is the HTTP status when one was received."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class TransportError(APIError):
    """The response body could not be read."""


class ConnectivityError(TransportError):
    """The request could not be built or the server could not be reached."""


class UnauthorizedError(APIError):
    """The server rejected our credentials."""

    def __init__(self, expected: int = 0):
        super().__init__(
            "Unauthorized, please log in first.",
            status=HTTP_UNAUTHORIZED,
            details={"expected": expected} if expected else None,
        )


class UnexpectedStatusError(APIError):
    """The server answered with a status code we did not ask for."""

    def __init__(self, got: int, expected: int):
        super().__init__(
            f"Unexpected return code from API, was={got}, expected={expected}",
            status=got,
            details={"got": got, "expected": expected},
        )
        self.got = got
        self.expected = expected


class DecodeError(APIError):
    """The response body does not have the shape of the requested record type."""


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""


class CredentialsError(CLIError):
    """Stored credentials are missing or cannot be read."""

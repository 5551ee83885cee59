"""
Core HTTP transport for the Slyft API.

Handles authentication headers and request construction. The error taxonomy
lives in ``errors`` and is re-exported here for callers of the transport.
"""

import http.client
import json
import logging
import sys
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from typing import Any, BinaryIO

from slyft_cli.core.auth import Credentials
from slyft_cli.core.errors import (
    HTTP_UNAUTHORIZED,
    APIError,
    CLIError,
    ConnectivityError,
    CredentialsError,
    DecodeError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
    ValidationError,
)

__all__ = [
    "APIClient",
    "APIError",
    "CLIError",
    "ConnectivityError",
    "DecodeError",
    "Response",
    "TransportError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "ValidationError",
    "status_error",
]

logger = logging.getLogger(__name__)

LOGIN_HINT = "You do not seem to be logged in. Please do a `slyft user login`"

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204


class Response:
    """
    A received HTTP response whose body has not been read yet.

    Wraps both successful ``urlopen`` results and ``HTTPError`` objects, so
    callers see every status code the same way. Use as a context manager to
    make sure the underlying connection is closed.
    """

    def __init__(self, status: int, headers: Mapping[str, str], stream: BinaryIO):
        self.status = status
        self.headers = headers
        self.stream = stream

    def read(self) -> bytes:
        """Read the full body."""
        try:
            return self.stream.read()
        except (OSError, http.client.HTTPException) as e:
            raise TransportError(f"Failed to read response body: {e}", status=self.status)

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "Response":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def status_error(status: int, expected: int) -> APIError:
    """Classify a status mismatch."""
    if status == HTTP_UNAUTHORIZED:
        return UnauthorizedError(expected)
    return UnexpectedStatusError(status, expected)


class APIClient:
    """
    Low-level HTTP client for the Slyft API.

    Handles:
    - Authentication via the access-token / client / uid header triple
    - A single attempt per call, no retries
    - Turning network failures into ConnectivityError
    """

    def __init__(
        self,
        base_url: str,
        credentials: Callable[[], Credentials] | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Backend base URL (SLYFTBACKEND)
            credentials: Callable returning the persisted credentials, may raise CredentialsError
            timeout: Optional socket timeout in seconds; None blocks indefinitely

        """
        self.base_url = base_url.rstrip("/")
        self._credentials = credentials
        self.timeout = timeout

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    def _auth_headers(self) -> dict[str, str]:
        """Collect auth headers, warning (but carrying on) when the user is not logged in."""
        if self._credentials is None:
            return {}
        try:
            creds = self._credentials()
        except CredentialsError as e:
            logger.warning("Reading credentials failed: %s", e.message)
            print(LOGIN_HINT, file=sys.stderr)
            return {}
        if not creds.good_for_login():
            logger.warning("Stored credentials are incomplete")
            print(LOGIN_HINT, file=sys.stderr)
        return creds.to_headers()

    def send(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        authenticated: bool = True,
    ) -> Response:
        """
        Issue one HTTP request.

        Args:
            path: API path (e.g., /v1/projects)
            method: HTTP method (GET, POST, DELETE)
            body: JSON-serialisable request body; None sends an empty payload
            authenticated: Attach the auth header triple

        Returns:
            The Response, for any status code

        Raises:
            ConnectivityError: On a malformed request or network failure

        """
        url = self._build_url(path)
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if authenticated:
            headers.update(self._auth_headers())

        data = json.dumps(body).encode("utf-8") if body is not None else b""
        logger.debug("%s %s", method, url)

        try:
            req = urllib.request.Request(url, data=data, headers=headers, method=method)
        except ValueError as e:
            logger.critical("Failed to create a request: %s", e)
            raise ConnectivityError(f"Failed to create a request: {e}")

        try:
            resp = urllib.request.urlopen(req, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            return Response(e.code, e.headers, e)
        except urllib.error.URLError as e:
            raise ConnectivityError(f"Connection error: {e.reason}")
        except TimeoutError:
            raise ConnectivityError(f"Request timed out after {self.timeout} seconds")
        except (OSError, http.client.HTTPException) as e:
            raise ConnectivityError(f"Connection error: {e}")
        except ValueError as e:
            raise ConnectivityError(f"Failed to create a request: {e}")

        return Response(resp.status, resp.headers, resp)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, body: Any = None) -> Response:
        """Make a GET request."""
        return self.send(path, "GET", body)

    def post(self, path: str, body: Any = None) -> Response:
        """Make a POST request."""
        return self.send(path, "POST", body)

    def delete(self, path: str) -> Response:
        """Make a DELETE request."""
        return self.send(path, "DELETE")

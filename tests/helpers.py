"""Shared test doubles and payload builders."""

import http.client
import io
import json
from typing import Any

from slyft_cli.core.client import APIClient, Response


def make_response(status: int, payload: Any = None, headers: dict | None = None, raw: bytes | None = None) -> Response:
    """Build a Response around an in-memory body."""
    if raw is None:
        raw = b"" if payload is None else json.dumps(payload).encode("utf-8")
    return Response(status, headers or {}, io.BytesIO(raw))


class TruncatedStream(io.BytesIO):
    """A body whose connection drops half-way, as http.client reports it."""

    def read(self, *args, **kwargs):
        raise http.client.IncompleteRead(b'{"id"', 100)


def truncated_response(status: int = 200) -> Response:
    return Response(status, {}, TruncatedStream())


class FakeTransport(APIClient):
    """APIClient that hands out queued responses instead of talking HTTP."""

    def __init__(self):
        super().__init__("http://slyft.test")
        self.calls: list[tuple[str, str, Any]] = []
        self.replies: list[Response | Exception] = []

    def reply(self, status: int, payload: Any = None, headers: dict | None = None, raw: bytes | None = None):
        self.replies.append(make_response(status, payload, headers, raw))
        return self

    def fail(self, error: Exception):
        self.replies.append(error)
        return self

    def queue(self, response: Response):
        self.replies.append(response)
        return self

    def send(self, path: str, method: str = "GET", body: Any = None, authenticated: bool = True) -> Response:
        self.calls.append((method, path, body))
        if not self.replies:
            raise AssertionError(f"unexpected request {method} {path}")
        item = self.replies.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleep:
    """Stands in for the poller's sleep; counts calls and never blocks."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> bool:
        self.calls.append(seconds)
        return False

    @property
    def elapsed(self) -> float:
        return sum(self.calls)


def job_payload(status: str = "queued", **overrides: Any) -> dict[str, Any]:
    data = {
        "id": 7,
        "kind": "build",
        "status": status,
        "project_id": 3,
        "project_name": "demo",
        "results": {
            "resultMessage": "",
            "resultStatus": 0,
            "resultAssets": [],
            "resultDetails": [],
        },
        "created_at": "2024-01-01T10:00:00Z",
        "updated_at": "2024-01-01T10:00:00Z",
    }
    data.update(overrides)
    return data


def asset_payload(asset_id: int, name: str, project_id: int = 3) -> dict[str, Any]:
    return {
        "id": asset_id,
        "name": name,
        "project_id": project_id,
        "project_name": "demo",
        "origin": "upload",
        "created_at": "2024-01-01T10:00:00Z",
        "updated_at": "2024-01-01T10:00:00Z",
    }

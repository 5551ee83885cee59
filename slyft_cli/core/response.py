"""
Turn raw responses into typed records.

One routine serves every record type: anything with a ``from_dict``
classmethod can be decoded, either from a JSON array or from a single
JSON object.
"""

import dataclasses
import json
import logging
from typing import Any, Protocol, TypeVar

from slyft_cli.core.client import DecodeError, Response, status_error

logger = logging.getLogger(__name__)


class FromDict(Protocol):
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Any: ...


R = TypeVar("R", bound=FromDict)


def _field_names(model: type) -> list[str]:
    if dataclasses.is_dataclass(model):
        return [f.name for f in dataclasses.fields(model)]
    return []


def _build(model: type[R], item: Any) -> R:
    if not isinstance(item, dict):
        raise TypeError(f"expected a JSON object, got {type(item).__name__}")
    return model.from_dict(item)


def decode(response: Response, expected_status: int, model: type[R], many: bool) -> list[R]:
    """
    Decode ``response`` into records of type ``model``.

    Args:
        response: The raw response
        expected_status: Status code that counts as success
        model: Record type to build
        many: Body is a JSON array (True) or a single object (False)

    Returns:
        The records in body order; a single object becomes a one-element list

    Raises:
        UnauthorizedError: Status was 401
        UnexpectedStatusError: Any other status mismatch (body is not read)
        TransportError: Body could not be read
        DecodeError: Body is not JSON of the expected shape

    """
    if response.status != expected_status:
        logger.debug("resp.status=%d / expected=%d", response.status, expected_status)
        raise status_error(response.status, expected_status)

    body = response.read()
    logger.debug("body=%s", body.decode("utf-8", errors="replace"))

    fields = _field_names(model)
    try:
        data = json.loads(body)
        if many:
            if not isinstance(data, list):
                raise TypeError(f"expected a JSON array, got {type(data).__name__}")
            return [_build(model, item) for item in data]
        return [_build(model, data)]
    except (ValueError, TypeError, KeyError) as e:
        raise DecodeError(
            f"Could not decode {model.__name__} ({', '.join(fields)}): {e}",
            status=response.status,
            details={"fields": fields},
        )


def decode_one(response: Response, expected_status: int, model: type[R]) -> R:
    """Decode a single-object body."""
    return decode(response, expected_status, model, many=False)[0]


def expect_status(response: Response, expected_status: int) -> None:
    """Check the status of a response whose body we do not care about."""
    if response.status != expected_status:
        logger.debug("resp.status=%d / expected=%d", response.status, expected_status)
        raise status_error(response.status, expected_status)

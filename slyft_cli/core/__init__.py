"""
Core layer - Raw types, HTTP transport and response decoding.

This layer provides:
- Typed dataclasses mirroring the backend resources
- The error taxonomy shared by every layer
- Low-level HTTP client with auth headers
- One generic decoder shared by every record type
"""

from slyft_cli.core.auth import Credentials
from slyft_cli.core.client import APIClient, Response
from slyft_cli.core.errors import (
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
from slyft_cli.core.response import decode, decode_one
from slyft_cli.core.types import Asset, Job, JobResult, Project

__all__ = [
    "APIClient",
    "APIError",
    "Asset",
    "CLIError",
    "ConnectivityError",
    "Credentials",
    "CredentialsError",
    "DecodeError",
    "Job",
    "JobResult",
    "Project",
    "Response",
    "TransportError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "ValidationError",
    "decode",
    "decode_one",
]

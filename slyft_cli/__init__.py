"""
Slyft CLI - Three-layer client for the Slyft build service.

Layers:
- core: Raw types, HTTP transport and response decoding
- sdk: High-level SlyftClient, including waiting for jobs
- cli: Opinionated command-line interface
"""

__version__ = "0.1.0"

from slyft_cli.sdk import SlyftClient  # noqa: E402

__all__ = ["SlyftClient"]

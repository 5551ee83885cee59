"""Locally persisted login credentials."""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from slyft_cli.core.errors import CredentialsError

CREDENTIALS_FILE = "credentials.json"


@dataclass(frozen=True)
class Credentials:
    """The token triple handed out by the backend on sign in."""

    access_token: str = ""
    client: str = ""
    uid: str = ""

    def good_for_login(self) -> bool:
        return bool(self.access_token and self.client and self.uid)

    def to_headers(self) -> dict[str, str]:
        return {
            "access-token": self.access_token,
            "client": self.client,
            "uid": self.uid,
        }

    @classmethod
    def from_headers(cls, headers) -> "Credentials":
        """Pick the token triple out of a sign-in response's headers."""
        return cls(
            access_token=headers.get("access-token") or "",
            client=headers.get("client") or "",
            uid=headers.get("uid") or "",
        )


def read_credentials(path: Path) -> Credentials:
    """Load credentials from ``path``."""
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError:
        raise CredentialsError(f"No credentials stored at {path}")
    except (OSError, json.JSONDecodeError) as e:
        raise CredentialsError(f"Cannot read credentials from {path}: {e}")
    if not isinstance(data, dict):
        raise CredentialsError(f"Malformed credentials file {path}")
    return Credentials(
        access_token=str(data.get("access_token") or ""),
        client=str(data.get("client") or ""),
        uid=str(data.get("uid") or ""),
    )


def save_credentials(credentials: Credentials, path: Path) -> None:
    """Persist credentials, readable by the current user only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(credentials), indent=2))
    os.chmod(path, 0o600)


def clear_credentials(path: Path) -> bool:
    """Remove stored credentials. Returns False if there were none."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True

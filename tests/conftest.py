"""Pytest configuration - loads .env and wires the fake transport."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from slyft_cli.config import Settings
from slyft_cli.sdk import SlyftClient
from tests.helpers import FakeTransport, RecordingSleep

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(base_url="http://slyft.test", config_dir=tmp_path / "config")


@pytest.fixture
def client(settings, transport) -> SlyftClient:
    return SlyftClient(settings, api=transport)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()

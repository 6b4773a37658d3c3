"""Pytest configuration and shared fixtures."""

import pytest

from fakes import FakeTransport
from tagger.config import TaggerSettings
from tagger.roster import RosterStore


@pytest.fixture
def store():
    return RosterStore()


@pytest.fixture
def transport():
    """Transport where user 1 is the only administrator."""
    return FakeTransport(admins={1})


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment and .env file."""
    return TaggerSettings(
        _env_file=None,
        telegram_bot_token="123456:TEST",
        sync_administrators=False,
        hide_mentions=False,
        log_file="",
    )

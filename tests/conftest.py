"""Shared test fixtures for readshelf tests."""
from contextlib import ExitStack
from unittest.mock import patch

import pytest

from src.app.config import Settings
from src.storage.db import init_db

# Modules that bind get_settings at import time
_SETTINGS_CONSUMERS = [
    "src.app.config.get_settings",
    "src.app.paths.get_settings",
    "src.app.logging.get_settings",
    "src.storage.db.get_settings",
    "src.ingest.extractor.get_settings",
    "src.web.server.get_settings",
    "src.cli.main.get_settings",
]


@pytest.fixture()
def tmp_settings(tmp_path):
    """Create a Settings instance backed by a temporary directory.

    Patches get_settings globally so all modules use the temp paths.
    """
    settings = Settings(
        db_path=tmp_path / "data" / "test.db",
        log_path=tmp_path / "logs" / "app.log",
        rules_path=None,
        fetch_timeout=1.0,
    )
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.log_path.parent.mkdir(parents=True, exist_ok=True)

    with ExitStack() as stack:
        for target in _SETTINGS_CONSUMERS:
            stack.enter_context(patch(target, return_value=settings))
        init_db()
        yield settings


@pytest.fixture()
def user(tmp_settings):
    """A stored user with an API key."""
    from src.storage.dao import UserDAO

    return UserDAO().create("user-1", "reader@example.com")


@pytest.fixture()
def other_user(tmp_settings):
    from src.storage.dao import UserDAO

    return UserDAO().create("user-2", "other@example.com")


@pytest.fixture()
def engine():
    """A fresh rule engine with the built-in rules."""
    from src.tagging.classifier import RuleEngine

    return RuleEngine()

"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers the CLI attaches to the 'src' logger.

    CliRunner swaps sys.stderr for each invocation; a handler left behind
    would write to a closed stream in later tests.
    """
    yield
    app_logger = logging.getLogger("src")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def github_env(monkeypatch):
    """Keep real credentials out of the tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_API_URL", raising=False)

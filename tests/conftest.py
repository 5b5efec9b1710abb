"""
Pytest configuration and shared fixtures for flowgazer tests.

Provides:
- Event, store and router fixtures (see ``tests/fixtures/events.py``)
- Logging configuration
- Environment isolation for the local identity variable
"""

import logging

import pytest

from flowgazer.utils.keys import ENV_PUBLIC_KEY


pytest_plugins = ["tests.fixtures.events"]


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def clear_pubkey_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without a local identity in the environment."""
    monkeypatch.delenv(ENV_PUBLIC_KEY, raising=False)

"""Root conftest — shared test configuration."""

import os

import pytest

# Ensure tests never reach a real database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("LOG_FORMAT", "text")

from tontinepro.config import Settings  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Defaults only: no .env file, explicit overrides per test."""
    return Settings(_env_file=None)

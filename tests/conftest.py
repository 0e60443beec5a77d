"""
Shared pytest configuration and fixtures for the Roam bridge tests.

This file provides common fixtures and configuration used across all test types
in the hexagonal architecture test suite.
"""

import pytest
import sys
from datetime import date
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from roambridge.core.domain import Credentials
from tests.fixtures.test_helpers import (
    FakeBrowserEnvironment, FakeRemoteApi, FakeSession, make_session_config
)


FIXED_DAY = date(2026, 10, 17)


# Domain Model Fixtures
@pytest.fixture
def credentials():
    """Credentials for a test graph."""
    return Credentials(workspace_id="test-graph", login="user@example.com", password="s3cret")


@pytest.fixture
def working_dir(tmp_path):
    """Empty working directory for downloads and staging files."""
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def session_config(working_dir):
    """Session config pointing at the working directory, without settle delays."""
    return make_session_config(working_dir)


@pytest.fixture
def fixed_today():
    """Clock returning a fixed day."""
    return lambda: FIXED_DAY


# Fake Adapter Fixtures
@pytest.fixture
def browser_env():
    """Fake Playwright environment; pass browser_env.playwright_factory to sessions."""
    return FakeBrowserEnvironment()


@pytest.fixture
def fake_api():
    """In-memory graph API."""
    return FakeRemoteApi()


@pytest.fixture
def fake_session(session_config, credentials):
    """Session that is always ready."""
    return FakeSession(session_config, credentials)


# Pytest Configuration Hooks
def pytest_configure(config):
    """Configure pytest with custom settings."""
    markers = [
        "unit: Unit tests (fast, isolated)",
        "integration: Integration tests (slower, multiple components)",
        "mock: Tests using fake browser only",
        "real: Tests requiring a real Roam graph"
    ]

    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Auto-mark tests based on file path
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        if "real" in item.name or "live" in item.name:
            item.add_marker(pytest.mark.real)
        else:
            item.add_marker(pytest.mark.mock)


def pytest_sessionstart(session):
    """Validate test environment at session start."""
    if sys.version_info < (3, 11):
        pytest.fail("Tests require Python 3.11 or higher")

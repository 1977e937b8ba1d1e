"""Pytest configuration and shared fixtures for llmchain tests.

This module provides:
- Common fixtures (mock backends, memory stores, canned responses)
- Setup/teardown for test isolation
"""

import os
import sys
from pathlib import Path
from typing import Dict

import pytest

# Add project root to Python path to allow imports from llmchain
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from llmchain.memory import RamMemory  # noqa: E402
from llmchain.providers import MockBackend  # noqa: E402
from tests.fixtures.canned_responses import SCENARIO_RESPONSES, scenario_responder  # noqa: E402


# ==================== Environment Fixtures ====================

@pytest.fixture(scope="function", autouse=True)
def isolate_environment():
    """Isolate each test by preventing environment variable pollution."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_env_vars(monkeypatch) -> Dict[str, str]:
    """Provide mock environment variables for testing.

    Returns:
        Dict of environment variables that can be modified per test
    """
    env_vars = {
        "OPENAI_API_KEY": "test-openai-key",
        "REDIS_HOST": "redis.test",
        "REDIS_PORT": "6380",
        "LOG_LEVEL": "ERROR",  # Suppress logs during tests
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


# ==================== Pipeline Fixtures ====================

@pytest.fixture
def memory() -> RamMemory:
    """Fresh in-process memory store."""
    return RamMemory()


@pytest.fixture
def scenario_backend() -> MockBackend:
    """Backend answering each step of the three-step scenario with canned text."""
    return MockBackend(scenario_responder)


@pytest.fixture
def scenario_responses() -> Dict[str, str]:
    return dict(SCENARIO_RESPONSES)

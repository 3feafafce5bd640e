"""Pytest configuration and fixtures for integration tests.

Ensures environment variables are loaded and validates the required API key
before running tests against the live Gemini API.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load .env before collection so the live client sees GEMINI_API_KEY."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    # Live calls can be slow; allow a single retry on transient errors
    os.environ.setdefault("MODEL_MAX_ATTEMPTS", "2")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip the whole session if GEMINI_API_KEY is not configured."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip(
            "Integration tests skipped. Missing API key: GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )


@pytest.fixture
def gemini_client():
    """Fresh client built from the current environment."""
    from pantry_ai.llm.gemini import GeminiClient
    from pantry_ai.utils.config import Config

    return GeminiClient(settings=Config())

"""Shared pytest fixtures."""

import pytest

from creo.config import Settings


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that call real vendor APIs",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="needs --run-live flag")
    for item in items:
        if "requires_live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from .env and with no API keys."""
    return Settings(
        _env_file=None,
        gemini_api_key=None,
        openai_api_key=None,
        anthropic_api_key=None,
        llm_call_deadline_s=None,
    )

"""Tests for provider detection."""

import pytest

from creo.llm.resolver import detect_provider, resolve_provider
from creo.llm.schemas import Provider


class TestDetectProvider:
    @pytest.mark.parametrize(
        "model,expected",
        [
            ("gpt-4o-mini", Provider.OPENAI),
            ("gpt-4-turbo", Provider.OPENAI),
            ("openai/gpt-oss", Provider.OPENAI),
            ("claude-3-5-sonnet-20241022", Provider.CLAUDE),
            ("anthropic.claude-v2", Provider.CLAUDE),
            ("gemini-2.0-flash", Provider.GEMINI),
            ("llama-3", Provider.GEMINI),
            ("", Provider.GEMINI),
        ],
    )
    def test_detect(self, model: str, expected: Provider) -> None:
        assert detect_provider(model) == expected

    def test_case_insensitive(self) -> None:
        assert detect_provider("GPT-4o") == Provider.OPENAI


class TestResolveProvider:
    def test_explicit_provider_wins(self) -> None:
        assert resolve_provider("gpt-4o", Provider.CLAUDE) == Provider.CLAUDE

    def test_falls_back_to_detection(self) -> None:
        assert resolve_provider("claude-3-haiku") == Provider.CLAUDE

"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from rephrase_ai.config import RephraseSettings
from rephrase_ai.llm.provider import LLMProvider
from rephrase_ai.stats.counter import UsageCounter
from rephrase_ai.tasks.dispatcher import TaskDispatcher

_SETTINGS_ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_BASE_URL",
    "GEMINI_TIMEOUT_SECONDS",
    "GEMINI_MAX_ATTEMPTS",
    "GEMINI_INITIAL_BACKOFF_SECONDS",
    "REPHRASE_WORD_LIMIT",
    "REPHRASE_STATS_INTERVAL_SECONDS",
    "REPHRASE_HOST",
    "PORT",
    "REPHRASE_WEB_ROOT",
    "REPHRASE_CORS_ORIGINS",
    "LOG_LEVEL",
)


class StubProvider(LLMProvider):
    """Returns queued replies (or raises queued exceptions) and records each call."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies: list[str | Exception] = list(replies)
        self.calls: list[dict[str, Any]] = []

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature})
        if not self.replies:
            raise AssertionError("StubProvider called more times than expected")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def make_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Callable[..., RephraseSettings]:
    """Build settings from a clean environment plus the given env overrides."""

    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    def _make(**env: str) -> RephraseSettings:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("REPHRASE_WEB_ROOT", str(tmp_path / "no-web"))
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return RephraseSettings(_env_file=None)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., RephraseSettings]) -> RephraseSettings:
    return make_settings()


@pytest.fixture
def counter() -> UsageCounter:
    return UsageCounter()


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def dispatcher(stub_provider: StubProvider, counter: UsageCounter) -> TaskDispatcher:
    return TaskDispatcher(provider=stub_provider, counter=counter)

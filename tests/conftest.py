import asyncio
from typing import Any, Dict, List, Tuple

import pytest
from typer.testing import CliRunner

from flashai.domain.interfaces.word_info_provider import WordInfoProvider
from flashai.infrastructure.config import settings

APPLE_PAYLOAD: Dict[str, Any] = {
    "meaning": "a round fruit of a tree of the rose family",
    "pronunciation": "/ˈæp.əl/",
    "example": "She ate an apple for lunch.",
    "example_translation": "彼女は昼食にりんごを食べた。",
    "english_example": "She ate an apple for lunch.",
    "notes": "Countable noun.",
    "wordClass": "noun",
    "translations": {"ja": "りんご", "es": "manzana", "fr": "pomme"},
}

class FakeClock:
    """Virtual monotonic clock whose `sleep` advances time instead of waiting."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)
        # Still yield so other coroutines get a turn
        await asyncio.sleep(0)

class FakeProvider(WordInfoProvider):
    """Provider double that records calls and replays scripted outcomes.

    Each item in `outcomes` is a payload to return or an exception to raise;
    the last item repeats once the list is used up.
    """

    name = "fake"

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes) or [APPLE_PAYLOAD]
        self.calls: List[Tuple[str, str]] = []

    async def generate_word_info(self, word: str, language: str) -> Dict[str, Any]:
        self.calls.append((word, language))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

@pytest.fixture
def fake_clock():
    return FakeClock()

@pytest.fixture
def make_provider():
    """Returns the FakeProvider class for building scripted providers."""
    return FakeProvider

@pytest.fixture
def apple_payload():
    return dict(APPLE_PAYLOAD)

@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps tests away from the user's config file, .env and API keys."""
    for var in ("GROQ_API_KEY", "DEEPSEEK_API_KEY", "AI_DEFAULT_PROVIDER"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(settings, "_loaded", True)
    monkeypatch.setattr(settings, "_config", {})
    settings.set_config_for_testing({"cache.path": str(tmp_path / "word_cache.pkl")})
    yield
    settings.clear_test_config()

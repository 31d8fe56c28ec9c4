import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from flashai import main
from flashai.domain.errors import MalformedResponseError
from flashai.domain.models.word_info import WordInfo
from flashai.infrastructure.config.settings import set_config_for_testing

# Import the app instance from main
from flashai.main import app

@pytest.fixture(autouse=True)
def fresh_dependencies(monkeypatch):
    """Rebuilds the composition root for every test without touching global logging."""
    monkeypatch.setattr(main, "_dependencies", {})
    monkeypatch.setattr(main, "setup_logging", MagicMock())
    set_config_for_testing({'rate_limit.min_interval_ms': 0})

@pytest.fixture
def mock_console_display(monkeypatch):
    """Patches ConsoleDisplay so UI calls can be asserted."""
    display = MagicMock()
    monkeypatch.setattr(main, "ConsoleDisplay", MagicMock(return_value=display))
    return display

@pytest.fixture
def fake_provider(monkeypatch, make_provider):
    provider = make_provider()
    create_provider = MagicMock(return_value=provider)
    monkeypatch.setattr(main, "create_provider", create_provider)
    provider.factory = create_provider
    return provider

def test_lookup_command_flow(runner: CliRunner, mock_console_display: MagicMock, fake_provider):
    """Test the full flow for the 'lookup' command with a scripted provider."""
    result = runner.invoke(app, ["lookup", "Apple", "--language", "ja"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert fake_provider.calls == [("Apple", "ja")]
    fake_provider.factory.assert_called_once_with("groq")

    info = mock_console_display.display_word_info.call_args.args[0]
    assert isinstance(info, WordInfo)
    assert info.translation("es") == "manzana"
    mock_console_display.display_error.assert_not_called()

def test_lookup_uses_persistent_cache_across_runs(runner: CliRunner, mock_console_display: MagicMock, fake_provider):
    assert runner.invoke(app, ["lookup", "apple"]).exit_code == 0

    # A new process would rebuild every dependency
    main._dependencies.clear()
    result = runner.invoke(app, ["lookup", "  APPLE "])

    assert result.exit_code == 0
    assert len(fake_provider.calls) == 1
    assert mock_console_display.display_word_info.call_count == 2

def test_lookup_malformed_response(runner: CliRunner, mock_console_display: MagicMock, monkeypatch, make_provider):
    provider = make_provider({"notes": "no meaning here"})
    monkeypatch.setattr(main, "create_provider", MagicMock(return_value=provider))

    result = runner.invoke(app, ["lookup", "xyz"])

    assert result.exit_code == 1
    assert len(provider.calls) == 1
    mock_console_display.display_error.assert_called_once_with(
        "The AI service returned an unreadable response. Please try again."
    )

def test_lookup_without_api_key(runner: CliRunner, mock_console_display: MagicMock):
    """With no key configured the command fails with a configuration message."""
    result = runner.invoke(app, ["lookup", "apple"])

    assert result.exit_code == 1
    message = mock_console_display.display_error.call_args.args[0]
    assert message.startswith("AI service not configured")
    assert "GROQ_API_KEY" in message

def test_provider_option_selects_provider(runner: CliRunner, mock_console_display: MagicMock, fake_provider):
    result = runner.invoke(app, ["lookup", "libro", "-p", "DeepSeek", "-l", "es"])

    assert result.exit_code == 0
    fake_provider.factory.assert_called_once_with("deepseek")

def test_invalid_provider_rejected(runner: CliRunner, mock_console_display: MagicMock):
    result = runner.invoke(app, ["lookup", "apple", "--provider", "openai"])

    assert result.exit_code == 2
    mock_console_display.display_word_info.assert_not_called()

def test_batch_command_flow(runner: CliRunner, mock_console_display: MagicMock, monkeypatch, make_provider):
    provider = make_provider()

    async def generate(word, language):
        provider.calls.append((word, language))
        if word == "xyz":
            raise MalformedResponseError("no meaning")
        return {"meaning": f"meaning of {word}"}

    provider.generate_word_info = generate
    monkeypatch.setattr(main, "create_provider", MagicMock(return_value=provider))

    result = runner.invoke(app, ["batch", "cat", "xyz", "dog", "Cat"])

    assert result.exit_code == 1
    assert [c[0] for c in provider.calls] == ["cat", "xyz", "dog"]
    mock_console_display.display_info.assert_called_once_with("Fetched 2 of 3 words.")
    mock_console_display.display_error.assert_called_once_with(
        "xyz: The AI service returned an unreadable response. Please try again."
    )

def test_status_command(runner: CliRunner, mock_console_display: MagicMock):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    status = mock_console_display.display_status.call_args.args[0]
    assert status.remaining_requests == 20
    assert status.queue_length == 0
    assert mock_console_display.display_status.call_args.kwargs['cache_stats']['size'] == 0

def test_clear_cache_command(runner: CliRunner, mock_console_display: MagicMock, fake_provider):
    runner.invoke(app, ["lookup", "apple"])
    runner.invoke(app, ["lookup", "pear"])

    result = runner.invoke(app, ["clear-cache", "--word", "Apple"])
    assert result.exit_code == 0
    mock_console_display.display_info.assert_called_with("Removed 'Apple' from the cache.")

    cache = main.get_dependencies()['cache']
    assert not cache.has("apple")
    assert cache.has("pear")

    runner.invoke(app, ["clear-cache"])
    mock_console_display.display_info.assert_called_with("Cache cleared.")
    assert len(cache) == 0

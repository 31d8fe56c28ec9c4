import asyncio
import pytest
from unittest.mock import MagicMock

from flashai.core.command_handler import CommandHandler, describe_error
from flashai.core.services.word_info_service import WordInfoService
from flashai.domain.errors import (
    ConfigurationError, FatalError, MalformedResponseError, RateLimitError, TransientNetworkError
)
from flashai.domain.interfaces.user_interface import UserInterface
from flashai.domain.models.common import RateLimitStatus
from flashai.domain.models.word_info import WordInfo

IDLE_STATUS = RateLimitStatus(remaining_requests=20, reset_in_seconds=60, queue_length=0, is_draining=False)

@pytest.fixture
def mock_word_info_service():
    service = MagicMock(spec=WordInfoService)
    service.get_status.return_value = IDLE_STATUS
    service.cache_stats.return_value = {'size': 3, 'max_size': 1000, 'utilization': 0.3}
    return service

@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)

@pytest.fixture
def command_handler(mock_word_info_service, mock_ui):
    """Fixture to create CommandHandler with mocked services."""
    return CommandHandler(word_info_service=mock_word_info_service, ui=mock_ui)

def info_for(word: str) -> WordInfo:
    return WordInfo(word=word, language="en", meaning=f"meaning of {word}")

def test_handle_lookup_displays_word_info(command_handler, mock_word_info_service, mock_ui):
    """Test that a successful lookup is shown to the user."""
    info = info_for("apple")
    mock_word_info_service.fetch_word_info.return_value = info

    assert asyncio.run(command_handler.handle_lookup("apple", "en")) is True

    mock_word_info_service.fetch_word_info.assert_awaited_once_with("apple", "en")
    mock_ui.display_word_info.assert_called_once_with(info)
    mock_ui.display_error.assert_not_called()

def test_handle_lookup_error(command_handler, mock_word_info_service, mock_ui):
    """Test that lookup failures become error messages."""
    mock_word_info_service.fetch_word_info.side_effect = RateLimitError(retry_after=12.2)

    assert asyncio.run(command_handler.handle_lookup("apple", "en")) is False

    mock_ui.display_error.assert_called_once_with("Rate limit exceeded. Try again in 13s.")
    mock_ui.display_word_info.assert_not_called()

@pytest.mark.parametrize("error, message", [
    (ConfigurationError("GROQ_API_KEY is not set"), "AI service not configured: GROQ_API_KEY is not set"),
    (RateLimitError(), "Rate limit exceeded. Please try again later."),
    (TransientNetworkError("HTTP 503"), "AI service temporarily unavailable: HTTP 503"),
    (MalformedResponseError("no meaning"), "The AI service returned an unreadable response. Please try again."),
    (ValueError("Word is required"), "Word is required"),
    (FatalError("bad request"), "Lookup failed: bad request"),
])
def test_describe_error(error, message):
    assert describe_error(error) == message

def test_handle_batch_reports_each_word(command_handler, mock_word_info_service, mock_ui):
    """Test that batch lookups show results and failures in input order."""
    async def fetch(word, language):
        if word == "xyz":
            raise MalformedResponseError("no meaning")
        return info_for(word)

    mock_word_info_service.fetch_word_info.side_effect = fetch

    failures = asyncio.run(command_handler.handle_batch(["apple", "xyz", "pear"], "en"))

    assert failures == 1
    shown = [c.args[0].word for c in mock_ui.display_word_info.call_args_list]
    assert shown == ["apple", "pear"]
    for c in mock_ui.display_word_info.call_args_list:
        assert c.kwargs == {'compact': True}
    mock_ui.display_error.assert_called_once_with(
        "xyz: The AI service returned an unreadable response. Please try again."
    )
    mock_ui.display_info.assert_called_once_with("Fetched 2 of 3 words.")

def test_handle_batch_skips_blank_and_duplicate_words(command_handler, mock_word_info_service):
    mock_word_info_service.fetch_word_info.side_effect = lambda word, language: info_for(word)

    asyncio.run(command_handler.handle_batch(["apple", " ", "Apple", "pear "], "es"))

    called = [c.args for c in mock_word_info_service.fetch_word_info.await_args_list]
    assert called == [("apple", "es"), ("pear", "es")]

def test_handle_batch_with_no_words(command_handler, mock_word_info_service, mock_ui):
    assert asyncio.run(command_handler.handle_batch(["", "  "], "en")) == 0

    mock_word_info_service.fetch_word_info.assert_not_called()
    mock_ui.display_error.assert_called_once_with("No words given.")

def test_handle_batch_polls_status_while_queue_is_busy(command_handler, mock_word_info_service, mock_ui):
    busy = RateLimitStatus(remaining_requests=19, reset_in_seconds=58, queue_length=1, is_draining=True)
    mock_word_info_service.get_status.return_value = busy

    async def slow_fetch(word, language):
        await asyncio.sleep(0.05)
        return info_for(word)

    mock_word_info_service.fetch_word_info.side_effect = slow_fetch

    asyncio.run(command_handler.handle_batch(["apple"], "en", poll_interval=0.01))

    mock_ui.display_status.assert_called_with(busy)

def test_handle_status(command_handler, mock_word_info_service, mock_ui):
    command_handler.handle_status()

    mock_ui.display_status.assert_called_once_with(
        IDLE_STATUS, cache_stats={'size': 3, 'max_size': 1000, 'utilization': 0.3}
    )

def test_handle_clear_cache_all(command_handler, mock_word_info_service, mock_ui):
    command_handler.handle_clear_cache()

    mock_word_info_service.clear_cache.assert_called_once_with(None)
    mock_ui.display_info.assert_called_once_with("Cache cleared.")

def test_handle_clear_cache_single_word(command_handler, mock_word_info_service, mock_ui):
    command_handler.handle_clear_cache(" apple ")

    mock_word_info_service.clear_cache.assert_called_once_with(" apple ")
    mock_ui.display_info.assert_called_once_with("Removed 'apple' from the cache.")

def test_handle_clear_cache_blank_word(command_handler, mock_word_info_service, mock_ui):
    mock_word_info_service.clear_cache.side_effect = ValueError("Word is required")

    command_handler.handle_clear_cache("  ")

    mock_ui.display_error.assert_called_once_with("Word is required")
    mock_ui.display_info.assert_not_called()

"""Main entry point for the flashai application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from flashai.core.command_handler import CommandHandler
from flashai.core.services.word_info_service import WordInfoService

# --- Domain Layer ---
from flashai.domain.errors import ConfigurationError
from flashai.domain.interfaces.word_info_provider import WordInfoProvider

# --- Infrastructure Layer ---
# Config
from flashai.infrastructure.config.settings import (
    SUPPORTED_PROVIDERS, get_api_key, get_cache_settings, get_config, get_default_model,
    get_default_provider, get_rate_limit_settings, get_retry_config, load_configuration
)
# UI
from flashai.infrastructure.cli.display import ConsoleDisplay
# AI Providers
from flashai.infrastructure.ai.groq.groq_client import GroqWordInfoProvider
from flashai.infrastructure.ai.deepseek.deepseek_client import DeepSeekWordInfoProvider
from flashai.infrastructure.ai.unconfigured import UnconfiguredProvider
# Cache
from flashai.infrastructure.cache.caching_service import InMemoryResponseCache, PersistentResponseCache
# Resilience
from flashai.infrastructure.resilience.api_retry import ApiRetryService
from flashai.infrastructure.resilience.rate_limiter import RateLimiter
# Monitoring
from flashai.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

PROVIDER_CLASSES = {
    'groq': GroqWordInfoProvider,
    'deepseek': DeepSeekWordInfoProvider,
}

# --- Dependency Injection Container (Manual) ---

def create_provider(provider_name: str) -> WordInfoProvider:
    """Instantiates the named provider, or a placeholder if it is not configured."""
    provider_cls = PROVIDER_CLASSES[provider_name]
    try:
        return provider_cls(
            api_key=get_api_key(provider_name),
            model=get_default_model(provider_name),
        )
    except ConfigurationError as e:
        logger.warning(f"{provider_name} provider not configured: {e}")
        return UnconfiguredProvider(provider_name, e)

def create_dependencies(provider: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. Exactly one RateLimiter is created
    here; every service needing the provider quota receives this instance.
    """
    # 1. Load Configuration First
    load_configuration()
    log_level_name = str(get_config('logging.level')).upper()
    setup_logging(
        log_level=getattr(logging, log_level_name, logging.INFO),
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )
    logger.debug("Configuration and logging initialized.")

    dependencies: Dict[str, Any] = {}

    # 2. Infrastructure Adapters & Services
    dependencies['ui'] = ConsoleDisplay()

    cache_settings = get_cache_settings()
    if cache_settings['persist']:
        dependencies['cache'] = PersistentResponseCache(
            path=cache_settings['path'],
            max_items=cache_settings['max_items'],
            ttl=cache_settings['ttl'],
        )
    else:
        dependencies['cache'] = InMemoryResponseCache(
            max_items=cache_settings['max_items'],
            ttl=cache_settings['ttl'],
        )

    dependencies['rate_limiter'] = RateLimiter(**get_rate_limit_settings())

    retry_config = get_retry_config()
    retry_config.on_retry = lambda attempt, error: logger.warning(
        f"AI request retry {attempt}/{retry_config.max_retries}: {error}"
    )
    dependencies['api_retry_service'] = ApiRetryService(config=retry_config)

    # 3. AI Provider
    provider_name = (provider or get_default_provider()).lower()
    dependencies['provider'] = create_provider(provider_name)

    # 4. Core Services
    dependencies['word_info_service'] = WordInfoService(
        provider=dependencies['provider'],
        cache=dependencies['cache'],
        rate_limiter=dependencies['rate_limiter'],
        retry_service=dependencies['api_retry_service'],
    )
    dependencies['command_handler'] = CommandHandler(
        word_info_service=dependencies['word_info_service'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies

_dependencies: Dict[Optional[str], Dict[str, Any]] = {}

def get_dependencies(provider: Optional[str] = None) -> Dict[str, Any]:
    """Returns the wired dependencies, creating them on first use."""
    if provider not in _dependencies:
        _dependencies[provider] = create_dependencies(provider)
    return _dependencies[provider]

# --- Typer App Definition ---
app = typer.Typer(
    name="flashai",
    help="flashai: AI word information for flashcards, with rate limiting, retries and caching.",
    add_completion=False,
)

def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Runs an async command handler from a sync Typer command."""
    return asyncio.run(coro)

def _validate_provider(provider: Optional[str]) -> Optional[str]:
    if provider is not None and provider.lower() not in SUPPORTED_PROVIDERS:
        raise typer.BadParameter(f"Choose one of: {', '.join(SUPPORTED_PROVIDERS)}")
    return provider.lower() if provider else None

# --- CLI Commands ---

ProviderOption = Annotated[
    Optional[str],
    typer.Option("--provider", "-p", callback=_validate_provider,
                 help="AI provider to use ('groq' or 'deepseek'). Uses default if not set.")
]
LanguageOption = Annotated[
    str,
    typer.Option("--language", "-l", help="Language code the word is studied in (e.g. 'en', 'es', 'ja').")
]

@app.command()
def lookup(
    word: Annotated[str, typer.Argument(help="The word to look up.")],
    language: LanguageOption = "en",
    provider: ProviderOption = None,
):
    """Show AI-generated information for a word."""
    handler: CommandHandler = get_dependencies(provider)['command_handler']
    if not run_async(handler.handle_lookup(word, language)):
        raise typer.Exit(code=1)

@app.command()
def batch(
    words: Annotated[List[str], typer.Argument(help="Words to look up, in order.")],
    language: LanguageOption = "en",
    provider: ProviderOption = None,
):
    """Look up several words through the shared request queue."""
    handler: CommandHandler = get_dependencies(provider)['command_handler']
    failures = run_async(handler.handle_batch(words, language))
    if failures:
        raise typer.Exit(code=1)

@app.command()
def status():
    """Show the rate limit quota, request queue and cache size."""
    handler: CommandHandler = get_dependencies()['command_handler']
    handler.handle_status()

@app.command(name="clear-cache")
def clear_cache_command(
    word: Annotated[Optional[str], typer.Option("--word", "-w", help="Only remove this word.")] = None,
):
    """Clear cached word information."""
    handler: CommandHandler = get_dependencies()['command_handler']
    handler.handle_clear_cache(word)

# --- Main Execution Guard ---

def cli_entry_point():
    """Function called by the console script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()

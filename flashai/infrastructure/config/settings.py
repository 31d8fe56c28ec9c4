"""Provides functions for loading and accessing configuration settings.

Supports loading from a YAML configuration file (~/.flashai/config.yaml),
a .env file and environment variables, and builds the settings objects
consumed by the rate limiter, the retry service and the cache.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from flashai.infrastructure.resilience.api_retry import RetryConfig

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".flashai"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

SUPPORTED_PROVIDERS = ('groq', 'deepseek')

DEFAULTS: Dict[str, Any] = {
    'ai.default_provider': 'groq',
    'rate_limit.min_interval_ms': 2000,
    'rate_limit.max_requests_per_window': 20,
    'rate_limit.window_duration_ms': 60000,
    'retry.max_retries': 3,
    'retry.initial_delay_ms': 1000,
    'retry.max_delay_ms': 10000,
    'cache.max_items': 1000,
    'cache.ttl_seconds': 7 * 24 * 60 * 60,
    'cache.persist': True,
    'cache.path': str(DEFAULT_CONFIG_DIR / "word_cache.pkl"),
    'logging.level': 'INFO',
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False

def _flatten(mapping: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in mapping.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from the YAML file and the .env file.

    Priority order (highest to lowest):
    1. Test overrides (set_config_for_testing)
    2. Environment Variables
    3. .env file (never overrides variables already set)
    4. YAML configuration file
    5. DEFAULTS

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path, override=False):
        logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("No .env file loaded.")

    _loaded = True

def _coerce(value: str) -> Any:
    """Converts an environment string to bool/int/float where it looks like one."""
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        return float(value) if '.' in value else int(value)
    except ValueError:
        return value

def env_var_name(key: str) -> str:
    """'rate_limit.min_interval_ms' -> 'RATE_LIMIT_MIN_INTERVAL_MS'."""
    return key.upper().replace('.', '_')

def get_config(key: str, default: Any = None) -> Any:
    """Gets a configuration value by dotted key.

    Args:
        key: The configuration key.
        default: Returned when the key is set nowhere. Falls back to DEFAULTS.

    Returns:
        The configuration value.
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default if default is not None else DEFAULTS.get(key)

def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_api_key(provider: str) -> Optional[str]:
    """Gets the API key for a provider (e.g. GROQ_API_KEY or groq.api_key in YAML)."""
    key = get_config(f'{provider.upper()}_API_KEY') or get_config(f'{provider}.api_key')
    return str(key) if key else None

def get_default_provider() -> str:
    provider = str(get_config('ai.default_provider')).lower()
    if provider not in SUPPORTED_PROVIDERS:
        logger.warning(f"Unknown provider '{provider}' in configuration. Using 'groq'.")
        return 'groq'
    return provider

def get_default_model(provider: Optional[str] = None) -> Optional[str]:
    """Gets the configured model for a provider, or None for the provider default."""
    model = get_config(f'ai.{provider or get_default_provider()}.default_model')
    return str(model) if model else None

def get_rate_limit_settings() -> Dict[str, float]:
    """Returns RateLimiter keyword arguments (seconds) from the millisecond settings."""
    return {
        'max_requests': int(get_config('rate_limit.max_requests_per_window')),
        'time_window': float(get_config('rate_limit.window_duration_ms')) / 1000,
        'min_interval': float(get_config('rate_limit.min_interval_ms')) / 1000,
    }

def get_retry_config() -> RetryConfig:
    return RetryConfig(
        max_retries=int(get_config('retry.max_retries')),
        initial_delay=float(get_config('retry.initial_delay_ms')) / 1000,
        max_delay=float(get_config('retry.max_delay_ms')) / 1000,
    )

def get_cache_settings() -> Dict[str, Any]:
    """Returns cache options; a max_items or ttl_seconds of 0 disables that limit."""
    max_items = int(get_config('cache.max_items') or 0)
    ttl = float(get_config('cache.ttl_seconds') or 0)
    return {
        'max_items': max_items or None,
        'ttl': ttl or None,
        'persist': bool(get_config('cache.persist')),
        'path': Path(str(get_config('cache.path'))).expanduser(),
    }

def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Sets configuration values that override every other source."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")

def clear_test_config() -> None:
    """Clears all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")

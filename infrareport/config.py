"""Configuration for infrareport.

Defaults live here as module constants. User overrides are read from
~/.infrareport/config.yaml by load_settings(); use 'infrareport config'
commands to modify them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from infrareport.exceptions import ConfigurationError
from infrareport.retry import RetryConfig


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.infrareport/config.yaml doesn't set them

DEFAULT_ANALYSIS_MODEL = "gemini-1.5-pro"
DEFAULT_IMAGE_MODEL = "imagen-3.0-generate-001"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.1

DEFAULT_RATE_LIMIT_MAX_REQUESTS = 10
DEFAULT_RATE_LIMIT_WINDOW = 60.0  # seconds

DEFAULT_CACHE_MAX_ENTRIES = 50
DEFAULT_CACHE_MAX_AGE = 24 * 60 * 60.0  # seconds

# Environment variables checked for the API key, in order
API_KEY_ENV_VARS = ["GEMINI_API_KEY", "GOOGLE_API_KEY"]

# Name under which the key is stored in ~/.infrareport/credentials
CREDENTIAL_KEY = API_KEY_ENV_VARS[0]

RATE_LIMITS_DOC_URL = "https://ai.google.dev/gemini-api/docs/rate-limits"

AVAILABLE_MODELS = [
    "gemini-1.5-pro",
    "gemini-1.5-flash",
    "gemini-2.0-flash",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
]

AVAILABLE_IMAGE_MODELS = [
    "imagen-3.0-generate-001",
    "imagen-3.0-generate-002",
]


@dataclass(frozen=True)
class Settings:
    """Effective settings for one process."""

    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    rate_limit_max_requests: int = DEFAULT_RATE_LIMIT_MAX_REQUESTS
    rate_limit_window: float = DEFAULT_RATE_LIMIT_WINDOW
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    cache_max_age: float = DEFAULT_CACHE_MAX_AGE
    cache_path: Optional[Path] = None
    retry: RetryConfig = field(default_factory=RetryConfig)


def load_settings() -> Settings:
    """Build Settings from the global config file, falling back to defaults.

    Returns:
        Validated Settings.

    Raises:
        ConfigurationError: If a configured value is malformed.
    """
    from infrareport import global_config

    try:
        raw = global_config.load_global_config()
        cache_path = global_config.get_cache_path()
    except global_config.GlobalConfigError as e:
        raise ConfigurationError(str(e))

    rate_limit = _section(raw, "rate_limit")
    cache = _section(raw, "cache")
    retry = _section(raw, "retry")

    try:
        retry_config = RetryConfig(
            max_retries=_positive_int(retry, "max_retries", 3),
            initial_delay=_non_negative_float(retry, "initial_delay", 2.0),
            max_delay=_non_negative_float(retry, "max_delay", 30.0),
            backoff_factor=_non_negative_float(retry, "backoff_factor", 2.0),
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid retry settings: {e}")

    return Settings(
        analysis_model=str(raw.get("model") or DEFAULT_ANALYSIS_MODEL),
        image_model=str(raw.get("image_model") or DEFAULT_IMAGE_MODEL),
        max_tokens=_positive_int(raw, "max_tokens", DEFAULT_MAX_TOKENS),
        temperature=_non_negative_float(raw, "temperature", DEFAULT_TEMPERATURE),
        rate_limit_max_requests=_positive_int(
            rate_limit, "max_requests", DEFAULT_RATE_LIMIT_MAX_REQUESTS
        ),
        rate_limit_window=_positive_float(
            rate_limit, "window_seconds", DEFAULT_RATE_LIMIT_WINDOW
        ),
        cache_max_entries=_positive_int(cache, "max_entries", DEFAULT_CACHE_MAX_ENTRIES),
        cache_max_age=_positive_float(cache, "max_age_seconds", DEFAULT_CACHE_MAX_AGE),
        cache_path=cache_path,
        retry=retry_config,
    )


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")
    return section


def _positive_int(data: Dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"'{key}' must be a positive integer, got {value!r}")
    return value


def _non_negative_float(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigurationError(f"'{key}' must be a non-negative number, got {value!r}")
    return float(value)


def _positive_float(data: Dict[str, Any], key: str, default: float) -> float:
    value = _non_negative_float(data, key, default)
    if value == 0:
        raise ConfigurationError(f"'{key}' must be greater than 0")
    return value

"""Global configuration management for infrareport.

Handles user-level configuration stored in ~/.infrareport/:
- config.yaml: Model, generation, rate limit, cache and retry settings
- credentials: API key for the Gemini API
"""

import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class GlobalConfigError(Exception):
    """Raised when there's an error with global configuration."""
    pass


_CONFIG_DIR = Path.home() / ".infrareport"


def get_global_config_dir() -> Path:
    """Get the global infrareport configuration directory.

    Returns:
        Path to ~/.infrareport/
    """
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to ~/.infrareport/
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file.

    Returns:
        Path to ~/.infrareport/config.yaml
    """
    return get_global_config_dir() / "config.yaml"


def get_credentials_file_path() -> Path:
    """Get path to credentials file.

    Returns:
        Path to ~/.infrareport/credentials
    """
    return get_global_config_dir() / "credentials"


def load_global_config() -> Dict[str, Any]:
    """Load global configuration from ~/.infrareport/config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except Exception as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise GlobalConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration to ~/.infrareport/config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except Exception as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def _read_credentials_file(credentials_file: Path) -> Dict[str, str]:
    credentials = {}
    with open(credentials_file, "r") as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue

            # Parse KEY=value format
            if "=" in line:
                key, value = line.split("=", 1)
                credentials[key.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Load API keys from ~/.infrareport/credentials.

    Returns:
        Dictionary mapping environment variable names to API keys.
    """
    credentials_file = get_credentials_file_path()

    if not credentials_file.exists():
        return {}

    try:
        return _read_credentials_file(credentials_file)
    except Exception as e:
        raise GlobalConfigError(f"Failed to load credentials from {credentials_file}: {e}")


def save_credential(key_name: str, api_key: str) -> None:
    """Save or update an API key in the credentials file.

    Args:
        key_name: Environment variable name (e.g., "GEMINI_API_KEY")
        api_key: The API key value.
    """
    ensure_global_config_dir()
    credentials_file = get_credentials_file_path()

    existing_creds = {}
    if credentials_file.exists():
        try:
            existing_creds = _read_credentials_file(credentials_file)
        except Exception as e:
            raise GlobalConfigError(f"Failed to read existing credentials: {e}")

    existing_creds[key_name] = api_key

    try:
        with open(credentials_file, "w") as f:
            f.write("# infrareport API credentials\n")
            f.write("# Format: GEMINI_API_KEY=your_key_here\n\n")

            for key, value in existing_creds.items():
                f.write(f"{key}={value}\n")

        # Owner read/write only
        os.chmod(credentials_file, stat.S_IRUSR | stat.S_IWUSR)

    except Exception as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(key_name: str) -> Optional[str]:
    """Get an API key from credentials file.

    Args:
        key_name: Environment variable name (e.g., "GEMINI_API_KEY")

    Returns:
        The API key if found, None otherwise.
    """
    return load_credentials().get(key_name)


def get_section(name: str) -> Dict[str, Any]:
    """Get a named section of the global config.

    Args:
        name: Section name (e.g., "rate_limit", "cache", "retry").

    Returns:
        The section dictionary, or an empty dict if absent.
    """
    section = load_global_config().get(name) or {}
    if not isinstance(section, dict):
        raise GlobalConfigError(f"Config section '{name}' must be a mapping")
    return section


def set_models(analysis_model: Optional[str] = None, image_model: Optional[str] = None) -> None:
    """Set the analysis and/or image model in global config.

    Args:
        analysis_model: Gemini model used for the structural analysis.
        image_model: Imagen model used for the repaired visualization.
    """
    config = load_global_config()
    if analysis_model:
        config["model"] = analysis_model
    if image_model:
        config["image_model"] = image_model
    save_global_config(config)


def get_cache_path() -> Optional[Path]:
    """Get a custom cache file path from global config.

    Returns:
        The configured path (with ~ expanded), or None to use the default.
    """
    path = get_section("cache").get("path")
    return Path(path).expanduser() if path else None


def initialize_default_config() -> None:
    """Initialize config.yaml with default values if it doesn't exist."""
    config_file = get_config_file_path()

    if config_file.exists():
        return

    ensure_global_config_dir()

    default_config = {
        "model": "gemini-1.5-pro",
        "image_model": "imagen-3.0-generate-001",
        "max_tokens": 4096,
        "temperature": 0.1,
        "rate_limit": {
            "max_requests": 10,
            "window_seconds": 60,
        },
        "cache": {
            "max_entries": 50,
            "max_age_seconds": 86400,
        },
        "retry": {
            "max_retries": 3,
            "initial_delay": 2.0,
            "max_delay": 30.0,
            "backoff_factor": 2.0,
        },
    }

    save_global_config(default_config)


def is_configured() -> bool:
    """Check if infrareport has been configured.

    Returns:
        True if config.yaml exists, False otherwise.
    """
    return get_config_file_path().exists()

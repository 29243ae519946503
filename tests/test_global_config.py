"""Tests for infrareport.global_config module."""

import stat
from pathlib import Path

import pytest
import yaml

from infrareport.global_config import (
    GlobalConfigError,
    ensure_global_config_dir,
    get_cache_path,
    get_config_file_path,
    get_credential,
    get_credentials_file_path,
    get_global_config_dir,
    get_section,
    initialize_default_config,
    is_configured,
    load_credentials,
    load_global_config,
    save_credential,
    save_global_config,
    set_models,
)


@pytest.fixture
def config_dir(mocker, temp_dir):
    """Point the global config directory at a temp location."""
    mock_dir = temp_dir / ".infrareport"
    mocker.patch("infrareport.global_config._CONFIG_DIR", mock_dir)
    return mock_dir


class TestGlobalConfigDir:
    """Tests for global config directory functions."""

    def test_get_global_config_dir_returns_path(self):
        """Test that get_global_config_dir returns a Path."""
        result = get_global_config_dir()
        assert isinstance(result, Path)
        assert ".infrareport" in str(result)

    def test_ensure_global_config_dir_creates_directory(self, config_dir):
        """Test that ensure_global_config_dir creates the directory."""
        result = ensure_global_config_dir()

        assert config_dir.exists()
        assert result == config_dir

    def test_file_paths(self, config_dir):
        """Test config and credentials file names."""
        assert get_config_file_path() == config_dir / "config.yaml"
        assert get_credentials_file_path() == config_dir / "credentials"


class TestLoadSaveGlobalConfig:
    """Tests for loading and saving global config."""

    def test_load_returns_empty_if_missing(self, config_dir):
        """Test that load returns empty dict if file doesn't exist."""
        assert load_global_config() == {}

    def test_load_returns_content(self, config_dir):
        """Test loading existing config."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("model: gemini-2.0-flash\n")

        assert load_global_config()["model"] == "gemini-2.0-flash"

    def test_load_rejects_non_mapping(self, config_dir):
        """Test that a YAML list is refused."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("- a\n- b\n")

        with pytest.raises(GlobalConfigError):
            load_global_config()

    def test_load_rejects_invalid_yaml(self, config_dir):
        """Test that malformed YAML raises GlobalConfigError."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("model: [unclosed\n")

        with pytest.raises(GlobalConfigError):
            load_global_config()

    def test_save_creates_file(self, config_dir):
        """Test saving config creates the file."""
        save_global_config({"model": "gemini-1.5-pro"})

        content = yaml.safe_load((config_dir / "config.yaml").read_text())
        assert content["model"] == "gemini-1.5-pro"

    def test_get_section(self, config_dir):
        """Test reading a nested section."""
        save_global_config({"cache": {"max_entries": 5}})

        assert get_section("cache") == {"max_entries": 5}
        assert get_section("retry") == {}

    def test_get_section_rejects_scalar(self, config_dir):
        """Test that a scalar section raises."""
        save_global_config({"cache": 5})

        with pytest.raises(GlobalConfigError):
            get_section("cache")


class TestCredentials:
    """Tests for credentials management."""

    def test_load_returns_empty_if_missing(self, config_dir):
        """Test load returns empty dict if no credentials file."""
        assert load_credentials() == {}

    def test_load_parses_file_and_skips_comments(self, config_dir):
        """Test loading credentials from file."""
        config_dir.mkdir(parents=True)
        (config_dir / "credentials").write_text("# comment\nGEMINI_API_KEY=test-key-123\n\n")

        assert load_credentials() == {"GEMINI_API_KEY": "test-key-123"}

    def test_save_credential_round_trip(self, config_dir):
        """Test saving then reading a credential."""
        save_credential("GEMINI_API_KEY", "secret-value")

        assert get_credential("GEMINI_API_KEY") == "secret-value"

    def test_save_credential_keeps_other_keys(self, config_dir):
        """Test that updating one key preserves others."""
        save_credential("OTHER_KEY", "other")
        save_credential("GEMINI_API_KEY", "first")
        save_credential("GEMINI_API_KEY", "second")

        assert load_credentials() == {"OTHER_KEY": "other", "GEMINI_API_KEY": "second"}

    def test_credentials_file_is_private(self, config_dir):
        """Test that the credentials file is owner read/write only."""
        save_credential("GEMINI_API_KEY", "secret-value")

        mode = stat.S_IMODE(get_credentials_file_path().stat().st_mode)
        assert mode == stat.S_IRUSR | stat.S_IWUSR

    def test_get_credential_missing(self, config_dir):
        """Test getting a missing credential returns None."""
        assert get_credential("GEMINI_API_KEY") is None


class TestModelsAndCache:
    """Tests for model and cache settings helpers."""

    def test_set_models(self, config_dir):
        """Test setting both models."""
        set_models("gemini-2.5-pro", "imagen-3.0-generate-002")

        config = load_global_config()
        assert config["model"] == "gemini-2.5-pro"
        assert config["image_model"] == "imagen-3.0-generate-002"

    def test_set_models_partial(self, config_dir):
        """Test that omitted models are left unchanged."""
        save_global_config({"model": "gemini-1.5-pro", "image_model": "imagen-3.0-generate-001"})

        set_models(image_model="imagen-3.0-generate-002")

        config = load_global_config()
        assert config["model"] == "gemini-1.5-pro"
        assert config["image_model"] == "imagen-3.0-generate-002"

    def test_get_cache_path_default(self, config_dir):
        """Test that no configured path returns None."""
        assert get_cache_path() is None

    def test_get_cache_path_expands_user(self, config_dir):
        """Test that ~ is expanded."""
        save_global_config({"cache": {"path": "~/reports/cache.json"}})

        assert get_cache_path() == Path("~/reports/cache.json").expanduser()


class TestInitializeDefaultConfig:
    """Tests for initialize_default_config and is_configured."""

    def test_creates_defaults(self, config_dir):
        """Test that defaults are written."""
        assert not is_configured()

        initialize_default_config()

        assert is_configured()
        config = load_global_config()
        assert config["model"] == "gemini-1.5-pro"
        assert config["rate_limit"] == {"max_requests": 10, "window_seconds": 60}
        assert config["cache"]["max_age_seconds"] == 86400
        assert config["retry"]["max_retries"] == 3

    def test_does_not_overwrite(self, config_dir):
        """Test that an existing config is kept."""
        save_global_config({"model": "gemini-2.5-flash"})

        initialize_default_config()

        assert load_global_config() == {"model": "gemini-2.5-flash"}

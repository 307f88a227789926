"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from vixgate.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration

_ENV_VARS = (
    "VIXGATE_LOG_LEVEL",
    "VIXGATE_ENVIRONMENT",
    "VIXGATE_SCRAPER_COMMAND",
    "VIXGATE_PROXY_URL",
    "VIXGATE_PROXY_PASSWORD",
    "VIXGATE_PROXY_BOTH_LINKS",
    "VIXGATE_PROVIDER_ENABLED",
    "VIXGATE_TMDB_API_KEY",
    "MFP_URL",
    "MFP_PSW",
    "BOTHLINK",
    "ANIMEUNITY_ENABLED",
    "TMDB_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "vixgate-test",
        "environment": "test",
        "http": {
            "timeout_seconds": 5.0,
            "user_agent": "TestAgent/1.0",
        },
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"dir": str(tmp_path / "cache"), "ttl_seconds": 1800},
        "scraper": {"command": "python3 /opt/scraper.py", "timeout_seconds": 12},
        "provider": {"label": "AU", "namespaces": ["kitsu", "imdb"]},
        "proxy": {"url": "https://mfp.yaml", "password": "yaml-pw"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    """Load with no YAML, no ENV, no CLI: pure defaults."""

    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "vixgate"
        assert config.environment == "dev"
        assert config.http_timeout_seconds == 15.0
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.cache_ttl_seconds == 86_400
        assert config.provider.enabled is True
        assert config.proxy.url == ""

    def test_defaults_derive_log_format_from_environment(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    """YAML values override defaults."""

    def test_yaml_overrides_defaults(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "vixgate-test"
        assert config.environment == "test"
        assert config.http_timeout_seconds == 5.0
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        assert config.cache_ttl_seconds == 1800
        assert config.scraper.command == ["python3", "/opt/scraper.py"]
        assert config.scraper.timeout_seconds == 12
        assert config.provider.namespaces == ["kitsu", "imdb"]
        assert config.proxy.password == "yaml-pw"

    def test_yaml_section_merge_keeps_other_keys(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.provider.label == "AU"
        assert config.provider.dub_marker == "(ita)"
        assert config.http_follow_redirects is True

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).app_name == "vixgate"

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)


class TestEnvOverrides:
    """Environment variables override YAML."""

    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VIXGATE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("VIXGATE_PROXY_URL", "https://mfp.env")
        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.proxy.url == "https://mfp.env"
        assert config.proxy.password == "yaml-pw"

    def test_legacy_env_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MFP_URL", "https://mfp.legacy")
        monkeypatch.setenv("MFP_PSW", "legacy-pw")
        monkeypatch.setenv("BOTHLINK", "true")
        monkeypatch.setenv("ANIMEUNITY_ENABLED", "false")
        monkeypatch.setenv("TMDB_API_KEY", "tmdb-key")

        config = load_config()

        assert config.proxy.url == "https://mfp.legacy"
        assert config.proxy.password == "legacy-pw"
        assert config.proxy.both_links is True
        assert config.provider.enabled is False
        assert config.tmdb_api_key == "tmdb-key"

    def test_scraper_command_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VIXGATE_SCRAPER_COMMAND", "node scraper.js --json")
        config = load_config()
        assert config.scraper.command == ["node", "scraper.js", "--json"]

    def test_dotenv_file_participates_as_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("MFP_URL=https://mfp.dotenv\n", encoding="utf-8")
        # registers MFP_URL with monkeypatch so the value load_dotenv sets is undone
        monkeypatch.setenv("MFP_URL", "")
        monkeypatch.delenv("MFP_URL")

        config = load_config(dotenv_path=dotenv)

        assert config.proxy.url == "https://mfp.dotenv"

    def test_dotenv_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    """CLI overrides win over every other layer."""

    def test_cli_overrides_env_and_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VIXGATE_LOG_LEVEL", "WARNING")
        config = load_config(
            config_path=yaml_config,
            cli_overrides={
                "log_level": "ERROR",
                "scraper_command": "python3 cli_scraper.py",
            },
        )
        assert config.log_level == "ERROR"
        assert config.scraper.command == ["python3", "cli_scraper.py"]
        # untouched YAML values survive
        assert config.scraper.timeout_seconds == 12

    def test_invalid_override_raises(self) -> None:
        with pytest.raises(ValueError):
            load_config(cli_overrides={"log_level": "TRACE"})

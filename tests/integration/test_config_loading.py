"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from cinestream.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "cinestream-test",
        "environment": "test",
        "http": {"timeout_seconds": 10.0, "user_agent": "TestAgent/1.0"},
        "logging": {"level": "DEBUG", "format": "console"},
        "store": {"max_age_seconds": 600},
        "sources": {
            "enabled": ["VegaMovies", "Bollyflix"],
            "base_urls": {"VegaMovies": "https://vegamovies.new"},
        },
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    """Load with no YAML, no ENV, no CLI: pure defaults."""

    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "cinestream"
        assert config.environment == "dev"
        assert config.http_timeout_seconds == 15.0
        assert config.http_max_redirects == 5
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.store.max_age_seconds == 86400
        assert config.store.sweep_interval_seconds == 3600
        assert config.search.max_results == 20
        assert config.search.concurrent is True
        assert config.sources.enabled is None

    def test_prod_derives_json_logs(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "cinestream-test"
        assert config.http_timeout_seconds == 10.0
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.log_level == "DEBUG"
        assert config.store.max_age_seconds == 600
        assert config.store.sweep_interval_seconds == 3600  # default preserved
        assert config.sources.enabled == ["VegaMovies", "Bollyflix"]
        assert config.sources.base_urls == {"VegaMovies": "https://vegamovies.new"}

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_empty_yaml_is_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).app_name == "cinestream"

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"search": {"max_results": 0}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CINESTREAM_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("CINESTREAM_STORE_MAX_AGE_SECONDS", "120")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.store.max_age_seconds == 120
        assert config.app_name == "cinestream-test"

    def test_sources_csv(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CINESTREAM_SOURCES_ENABLED", "MultiMovies, MoviesDrive")
        config = load_config()
        assert config.sources.enabled == ["MultiMovies", "MoviesDrive"]

    def test_search_flags(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CINESTREAM_SEARCH_CONCURRENT", "false")
        monkeypatch.setenv("CINESTREAM_SEARCH_MAX_RESULTS", "5")
        config = load_config()
        assert config.search.concurrent is False
        assert config.search.max_results == 5

    def test_dotenv_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CINESTREAM_HTTP_MAX_REDIRECTS=2\n", encoding="utf-8")

        try:
            config = load_config(dotenv_path=env_file)
        finally:
            # load_dotenv writes straight into os.environ.
            os.environ.pop("CINESTREAM_HTTP_MAX_REDIRECTS", None)
        assert config.http_max_redirects == 2

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    def test_cli_beats_env_and_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CINESTREAM_LOG_LEVEL", "WARNING")
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"log_level": "ERROR", "sources_enabled": "MoviesMode"},
        )
        assert config.log_level == "ERROR"
        assert config.sources.enabled == ["MoviesMode"]

    def test_sectioned_cli_override(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"http": {"timeout_seconds": 5.0}},
        )
        assert config.http_timeout_seconds == 5.0
        assert config.http_user_agent == "TestAgent/1.0"


class TestSectionedDump:
    def test_round_trip_shape(self, yaml_config: Path) -> None:
        data = load_config(config_path=yaml_config).to_sectioned_dict()
        assert data["http"]["timeout_seconds"] == 10.0
        assert data["logging"] == {"level": "DEBUG", "format": "console"}
        assert data["store"]["max_age_seconds"] == 600
        assert set(data) == {
            "app_name",
            "environment",
            "http",
            "logging",
            "store",
            "search",
            "sources",
        }

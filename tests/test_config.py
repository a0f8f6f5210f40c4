"""Tests for application configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from docgrounder.config import AppConfig


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self) -> None:
        """Should create config with default values."""
        config = AppConfig()

        assert config.data_dir == Path("data")
        assert config.model_name == "sentence-transformers/all-MiniLM-L6-v2"
        assert config.max_tokens == 400
        assert config.overlap == 50
        assert config.batch_size == 10
        assert config.top_k == 5
        assert config.llm_base_url == "https://openrouter.ai/api/v1"
        assert config.llm_api_key is None
        assert config.max_prompt_chars == 8000

    def test_custom_config(self) -> None:
        """Should create config with custom values."""
        config = AppConfig(data_dir=Path("/corpus"), model_name="custom-model", max_tokens=300)

        assert config.data_dir == Path("/corpus")
        assert config.model_name == "custom-model"
        assert config.max_tokens == 300

    def test_resolve_data_dir_absolute(self) -> None:
        """Should return absolute path as-is."""
        config = AppConfig(data_dir=Path("/absolute/data"))

        assert config.resolve_data_dir(Path("/base")) == Path("/absolute/data")

    def test_resolve_data_dir_relative_no_base(self) -> None:
        """Should return relative path when no base_dir provided."""
        assert AppConfig(data_dir=Path("rel")).resolve_data_dir() == Path("rel")

    def test_resolve_data_dir_relative_with_base(self) -> None:
        """Should resolve relative path against base_dir."""
        config = AppConfig()

        assert config.resolve_data_dir(Path("/project")) == Path("/project/data")


class TestFromEnv:
    """Test environment overrides."""

    def test_defaults_without_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to defaults when nothing is set."""
        for name in (
            "DOCGROUNDER_DATA_DIR",
            "DOCGROUNDER_MODEL",
            "DOCGROUNDER_LLM_MODEL",
            "DOCGROUNDER_LLM_BASE_URL",
            "OPENROUTER_API_KEY",
        ):
            monkeypatch.delenv(name, raising=False)

        assert AppConfig.from_env() == AppConfig()

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should read settings from the environment."""
        monkeypatch.setenv("DOCGROUNDER_DATA_DIR", "/srv/json")
        monkeypatch.setenv("DOCGROUNDER_MODEL", "my-embedder")
        monkeypatch.setenv("DOCGROUNDER_LLM_MODEL", "my-llm")
        monkeypatch.setenv("DOCGROUNDER_LLM_BASE_URL", "http://localhost:11434/v1")
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")

        config = AppConfig.from_env()

        assert config.data_dir == Path("/srv/json")
        assert config.model_name == "my-embedder"
        assert config.llm_model == "my-llm"
        assert config.llm_base_url == "http://localhost:11434/v1"
        assert config.llm_api_key == "sk-test"

    def test_blank_key_is_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An empty API key counts as missing."""
        monkeypatch.setenv("OPENROUTER_API_KEY", "")

        assert AppConfig.from_env().llm_api_key is None

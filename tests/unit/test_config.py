"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from planlog.core.config import CONFIG_FILENAME, Config, ConfigError, find_config_file
from planlog.core.error_handling import ConfigurationError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty working directory and home."""
    work = tmp_path / "work"
    home = tmp_path / "home"
    work.mkdir()
    home.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HOME", str(home))
    return work, home


class TestConfig:
    """Test cases for Config class."""

    def create_config(self, directory: Path, content: str) -> Path:
        path = directory / CONFIG_FILENAME
        path.write_text(content)
        return path

    def test_defaults_without_file(self, isolated):
        """Defaults are used when no config file is found."""
        if Path("/etc/planlog", CONFIG_FILENAME).exists():
            pytest.skip("system configuration present")
        config = Config()
        assert config.source is None
        assert config.plans["prefix"] == "todo"
        assert config.deploy["branch"] == "main"
        config.validate()

    def test_local_file_merged_over_defaults(self, isolated):
        work, _ = isolated
        self.create_config(
            work,
            """
[plans]
prefix = "plan"

[deploy]
site_url = "https://example.github.io/svg2gcode/"
expected_text = "svg2gcode"
""",
        )
        config = Config()
        assert config.source == work / CONFIG_FILENAME
        assert config.plans["prefix"] == "plan"
        assert config.plans["number_width"] == 3
        assert config.deploy["site_url"] == "https://example.github.io/svg2gcode/"
        assert config.deploy["remote"] == "origin"

    def test_user_file_found(self, isolated):
        _, home = isolated
        user_dir = home / ".config" / "planlog"
        user_dir.mkdir(parents=True)
        self.create_config(user_dir, '[deploy]\nbranch = "release"\n')
        assert find_config_file() == user_dir / CONFIG_FILENAME
        assert Config().deploy["branch"] == "release"

    def test_local_file_wins_over_user_file(self, isolated):
        work, home = isolated
        user_dir = home / ".config" / "planlog"
        user_dir.mkdir(parents=True)
        self.create_config(user_dir, '[deploy]\nbranch = "release"\n')
        self.create_config(work, '[deploy]\nbranch = "main"\n')
        assert Config().source == work / CONFIG_FILENAME

    def test_explicit_path(self, tmp_path):
        path = self.create_config(tmp_path, "[logging]\nlevel = \"DEBUG\"\n")
        config = Config(path)
        assert config.logging["level"] == "DEBUG"

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            Config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        path = self.create_config(tmp_path, "invalid toml content [")
        with pytest.raises(ConfigError, match="Failed to load"):
            Config(path)

    def test_config_error_is_configuration_error(self):
        assert issubclass(ConfigError, ConfigurationError)

    def test_get_and_get_section(self):
        config = Config(data={})
        assert config.get("deploy", "interval") == 15
        assert config.get("deploy", "missing", "fallback") == "fallback"
        with pytest.raises(ConfigError):
            config.get("deploy", "missing")
        with pytest.raises(ConfigError):
            config.get_section("nope")

    def test_plans_directory(self, tmp_path):
        config = Config(data={"plans": {"directory": "docs/plans"}})
        assert config.plans_directory(tmp_path) == tmp_path / "docs" / "plans"
        assert config.plans_directory() == Path("docs/plans")

    def test_to_toml_skips_none(self):
        text = Config(data={}).to_toml()
        assert "[deploy]" in text
        assert "file" not in text.split("[logging]")[1]


class TestConfigValidation:
    """Test configuration validation."""

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"plans": {"prefix": "bad prefix"}}, "prefix"),
            ({"plans": {"number_width": 0}}, "number_width"),
            ({"plans": {"statuses": []}}, "non-empty"),
            ({"plans": {"statuses": ["Done"]}}, "lowercase"),
            ({"plans": {"statuses": ["done", "open"]}}, "open"),
            ({"deploy": {"timeout": 0}}, "timeout"),
            ({"deploy": {"interval": -1}}, "interval"),
            ({"deploy": {"interval": 700}}, "exceed"),
            ({"deploy": {"site_url": "ftp://example.com"}}, "http"),
        ],
    )
    def test_invalid_values(self, overrides, message):
        config = Config(data=overrides)
        with pytest.raises(ConfigError, match=message):
            config.validate()

    def test_valid_site_url(self):
        Config(data={"deploy": {"site_url": "https://example.com/app/"}}).validate()

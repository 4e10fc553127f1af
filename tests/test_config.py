"""Tests for config loading, validation, and env var overrides."""

from pathlib import Path

import pytest

from gitstate.config.defaults import DEFAULT_TOML
from gitstate.config.loader import ConfigError, load_config
from gitstate.config.schema import GitStateConfig


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg == GitStateConfig()
        assert cfg.git.base_rev == "HEAD"
        assert cfg.git.timeout == 30
        assert cfg.output.format == "terminal"

    def test_custom_toml(self, tmp_path: Path):
        (tmp_path / ".gitstate.toml").write_text(
            'version = "1.0"\n'
            '[git]\n'
            'base_rev = "main"\n'
            'timeout = 5\n'
            '[output]\n'
            'format = "json"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.git.base_rev == "main"
        assert cfg.git.timeout == 5
        assert cfg.output.format == "json"

    def test_unknown_keys_ignored(self, tmp_path: Path):
        (tmp_path / ".gitstate.toml").write_text('[git]\nbogus = 1\n[extra]\nx = 2\n')
        cfg = load_config(tmp_path)
        assert cfg.git.binary == "git"

    def test_starter_template_loads(self, tmp_path: Path):
        (tmp_path / ".gitstate.toml").write_text(DEFAULT_TOML)
        assert load_config(tmp_path) == GitStateConfig()

    def test_config_override_path(self, tmp_path: Path):
        custom = tmp_path / "custom.toml"
        custom.write_text('[git]\nbase_rev = "origin/main"\n')
        cfg = load_config(tmp_path, config_override=str(custom))
        assert cfg.git.base_rev == "origin/main"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_override="/nonexistent/config.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        (tmp_path / ".gitstate.toml").write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_invalid_format_raises(self, tmp_path: Path):
        (tmp_path / ".gitstate.toml").write_text('[output]\nformat = "sarif"\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestEnvVarOverrides:
    def test_base_rev_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITSTATE_BASE_REV", "develop")
        assert load_config(tmp_path).git.base_rev == "develop"

    def test_format_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITSTATE_FORMAT", "json")
        assert load_config(tmp_path).output.format == "json"

    def test_timeout_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITSTATE_GIT_TIMEOUT", "90")
        assert load_config(tmp_path).git.timeout == 90

    def test_invalid_env_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GITSTATE_FORMAT", "xml")
        monkeypatch.setenv("GITSTATE_GIT_TIMEOUT", "soon")
        cfg = load_config(tmp_path)
        assert cfg.output.format == "terminal"
        assert cfg.git.timeout == 30

    def test_env_beats_file(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".gitstate.toml").write_text('[git]\nbase_rev = "main"\n')
        monkeypatch.setenv("GITSTATE_BASE_REV", "release")
        assert load_config(tmp_path).git.base_rev == "release"

"""Unit tests for tool configuration loading."""

import pytest

from mvnide.config import CONFIG_ENV_VAR, EXECUTION_ENVIRONMENTS, MvnideConfig
from mvnide.core.errors import SettingsLoadError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (CONFIG_ENV_VAR, "MVNIDE_OFFLINE", "MVNIDE_USER_SETTINGS"):
        monkeypatch.delenv(name, raising=False)


class TestMvnideConfig:
    def test_defaults_when_file_missing(self, tmp_path):
        config = MvnideConfig.load(tmp_path / "missing.yaml")
        assert config.offline is False
        assert config.user_settings_file is None
        assert config.goals == ["process-test-resources"]
        assert set(config.installed_environments) == set(EXECUTION_ENVIRONMENTS.values())

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("user_settings_file: ~/.m2/settings.xml\noffline: true\ngoals: [compile]\nunknown: 1\n")
        config = MvnideConfig.load(path)
        assert config.user_settings_file == "~/.m2/settings.xml"
        assert config.offline is True
        assert config.goals == ["compile"]

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("offline: true\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert MvnideConfig.load().offline is True

    def test_environment_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("offline: true\nuser_settings_file: a.xml\n")
        monkeypatch.setenv("MVNIDE_OFFLINE", "no")
        monkeypatch.setenv("MVNIDE_USER_SETTINGS", "b.xml")
        config = MvnideConfig.load(path)
        assert config.offline is False
        assert config.user_settings_file == "b.xml"

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("offline: [unclosed\n")
        with pytest.raises(SettingsLoadError, match="Failed to parse"):
            MvnideConfig.load(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SettingsLoadError) as exc_info:
            MvnideConfig.load(path)
        assert exc_info.value.problems == ["top level must be a mapping"]

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("goals: 42\n")
        with pytest.raises(SettingsLoadError, match="Invalid configuration"):
            MvnideConfig.load(path)

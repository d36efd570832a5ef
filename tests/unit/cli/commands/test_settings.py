"""
Unit tests for the 'settings' commands.
"""

import json

from mvnide.cli.main import main


class TestSettingsShow:
    def test_json(self, runner, config_file, local_repo, remote_repo):
        result = runner.invoke(main, ["settings", "show", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["local_repository"] == str(local_repo)
        assert data["mirrors"][0]["id"] == "files"
        assert data["mirrors"][0]["url"] == remote_repo.as_uri()

    def test_summary(self, runner, config_file, local_repo):
        result = runner.invoke(main, ["settings", "show"])

        assert result.exit_code == 0, result.output
        assert f"Local repository: {local_repo}" in result.output
        assert "Mirrors" in result.output
        assert "internal" in result.output
        assert "Servers: files" in result.output

    def test_unreadable_settings(self, runner, config_file, tmp_path):
        (tmp_path / "settings.xml").write_text("<settings><mirrors>")

        result = runner.invoke(main, ["settings", "show"])

        assert result.exit_code == 1
        assert "Could not read settings.xml" in result.output


class TestSettingsValidate:
    def test_valid_file(self, runner, config_file, tmp_path):
        result = runner.invoke(main, ["settings", "validate", str(tmp_path / "settings.xml")])

        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_problems_are_listed(self, runner, config_file, tmp_path):
        broken = tmp_path / "broken.xml"
        broken.write_text("<settings><mirrors><mirror><id>m</id></mirror></mirrors></settings>")

        result = runner.invoke(main, ["settings", "validate", str(broken)])

        assert result.exit_code == 1
        assert "mirror 'm' is missing id, url or mirrorOf" in result.output

    def test_missing_file(self, runner, config_file, tmp_path):
        result = runner.invoke(main, ["settings", "validate", str(tmp_path / "nowhere.xml")])

        assert result.exit_code == 1
        assert "Can not read settings file" in result.output


class TestMainGroup:
    def test_explicit_config_path(self, runner, config_file, tmp_path, monkeypatch):
        monkeypatch.delenv("MVNIDE_CONFIG")
        other = tmp_path / "other.yaml"
        other.write_text("offline: true\n")

        result = runner.invoke(main, ["--config", str(other), "settings", "show", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["local_repository"] is None

    def test_malformed_config(self, runner, config_file):
        config_file.write_text("user_settings_file: [unclosed\n")

        result = runner.invoke(main, ["settings", "show"])

        assert result.exit_code == 1
        assert "Failed to parse" in result.output

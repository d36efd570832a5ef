"""
Unit tests for the 'plan' command.
"""

import json

from mvnide.cli.main import main


class TestPlanCommand:
    def test_json_plan(self, runner, config_file, java_project):
        result = runner.invoke(main, ["plan", "compile", "-p", str(java_project), "--json"])

        assert result.exit_code == 0, result.output
        executions = json.loads(result.output)["executions"]
        assert [e["goal"] for e in executions] == ["resources", "compile"]
        assert executions[1]["configuration"] == {"source": "1.6", "target": "1.6"}

    def test_default_goals_and_levels(self, runner, config_file, java_project):
        result = runner.invoke(main, ["plan", "-p", str(java_project)])

        assert result.exit_code == 0, result.output
        assert "process-test-resources" in result.output
        assert "testResources" in result.output
        assert "Compiler source 1.6, target 1.6" in result.output

    def test_pom_path_accepted(self, runner, config_file, java_project):
        result = runner.invoke(main, ["plan", "compile", "-p", str(java_project / "pom.xml"), "--json"])

        assert result.exit_code == 0, result.output

    def test_unknown_phase(self, runner, config_file, java_project):
        result = runner.invoke(main, ["plan", "compil", "-p", str(java_project)])

        assert result.exit_code == 1
        assert "Could not calculate build plan" in result.output
        assert "Caused by: Unknown lifecycle phase" in result.output

    def test_unreadable_pom(self, runner, config_file, tmp_path):
        (tmp_path / "pom.xml").write_text("<project>")

        result = runner.invoke(main, ["plan", "-p", str(tmp_path)])

        assert result.exit_code == 1
        assert "Could not read" in result.output

"""
Unit tests for the 'reactor' command.
"""

from mvnide.cli.main import main

MODULES = "<modules><module>app</module><module>core</module></modules>"


def _depends_on(artifact_id):
    return (
        "<dependencies><dependency><groupId>org.example</groupId>"
        f"<artifactId>{artifact_id}</artifactId><version>1.0</version>"
        "</dependency></dependencies>"
    )


class TestReactorCommand:
    def test_build_order(self, runner, config_file, tmp_path, write_pom):
        write_pom(tmp_path / "build", "root", packaging="pom", body=MODULES)
        write_pom(tmp_path / "build" / "app", "app", body=_depends_on("core"))
        write_pom(tmp_path / "build" / "core", "core")

        result = runner.invoke(main, ["reactor", "-p", str(tmp_path / "build")])

        assert result.exit_code == 0, result.output
        assert "Reactor build order (3 modules):" in result.output
        lines = [line.strip() for line in result.output.splitlines() if line.strip()[:1].isdigit()]
        assert lines == [
            "1. root [org.example:root]",
            "2. core [org.example:core]",
            "3. app [org.example:app]",
        ]

    def test_cycle(self, runner, config_file, tmp_path, write_pom):
        write_pom(tmp_path / "build", "root", packaging="pom", body=MODULES)
        write_pom(tmp_path / "build" / "app", "app", body=_depends_on("core"))
        write_pom(tmp_path / "build" / "core", "core", body=_depends_on("app"))

        result = runner.invoke(main, ["reactor", "-p", str(tmp_path / "build")])

        assert result.exit_code == 1
        assert "unable to sort projects" in result.output
        assert "Caused by: Dependency cycle detected" in result.output

    def test_missing_module(self, runner, config_file, tmp_path, write_pom):
        write_pom(tmp_path / "build", "root", packaging="pom", body=MODULES)

        result = runner.invoke(main, ["reactor", "-p", str(tmp_path / "build")])

        assert result.exit_code == 1
        assert "Module 'app'" in result.output

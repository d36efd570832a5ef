"""
Unit tests for the 'resolve' command.
"""

from mvnide.cli.main import main


def _publish(remote_repo, relative_path, content=b"jar"):
    target = remote_repo / relative_path
    target.parent.mkdir(parents=True)
    target.write_bytes(content)
    return target


class TestResolveCommand:
    def test_resolves_through_mirror(self, runner, config_file, remote_repo, local_repo):
        _publish(remote_repo, "org/example/lib/1.0/lib-1.0.jar", b"payload")

        result = runner.invoke(main, ["resolve", "org.example:lib:1.0", "-q"])

        assert result.exit_code == 0, result.output
        assert "Resolved org.example:lib:jar:1.0" in result.output
        installed = local_repo / "org" / "example" / "lib" / "1.0" / "lib-1.0.jar"
        assert installed.read_bytes() == b"payload"
        assert str(installed) in result.output

    def test_classifier(self, runner, config_file, remote_repo, local_repo):
        _publish(remote_repo, "org/example/lib/1.0/lib-1.0-sources.jar")

        result = runner.invoke(main, ["resolve", "org.example:lib:jar:sources:1.0", "-q"])

        assert result.exit_code == 0, result.output
        assert (local_repo / "org" / "example" / "lib" / "1.0" / "lib-1.0-sources.jar").is_file()

    def test_missing_artifact(self, runner, config_file):
        result = runner.invoke(main, ["resolve", "org.example:gone:1.0", "-q"])

        assert result.exit_code == 1
        assert "Could not resolve artifact" in result.output
        assert "Missing org.example:gone:jar:1.0" in result.output

    def test_check_before_and_after_lookup(self, runner, config_file):
        before = runner.invoke(main, ["resolve", "--check", "org.example:gone:1.0"])
        runner.invoke(main, ["resolve", "org.example:gone:1.0", "-q"])
        after = runner.invoke(main, ["resolve", "--check", "org.example:gone:1.0"])

        assert before.exit_code == 0
        assert "may be available" in before.output
        assert after.exit_code == 1
        assert "already looked up in every repository" in after.output

    def test_invalid_coordinate(self, runner, config_file):
        result = runner.invoke(main, ["resolve", "not-a-coordinate"])

        assert result.exit_code == 2

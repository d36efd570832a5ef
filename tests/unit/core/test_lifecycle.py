"""Unit tests for lifecycle expansion and mojo parameter reading."""

import pytest

from mvnide.core.lifecycle import ConfigurationParameterReader, DefaultLifecycleExecutor
from mvnide.core.project import PluginDeclaration, PluginExecutionDeclaration, ProjectModel
from mvnide.core.session import BuildSession, ExecutionRequest
from mvnide.core.types import MojoExecution


def _session(tmp_path, **fields) -> BuildSession:
    project = ProjectModel(group_id="org.example", artifact_id="demo", version="1.0", basedir=str(tmp_path), **fields)
    return BuildSession(request=ExecutionRequest(), project=project)


def _keys(executions):
    return [f"{e.artifact_id}:{e.goal}@{e.execution_id}" for e in executions]


class TestLifecyclePhases:
    def test_jar_packaging_up_to_process_test_resources(self, tmp_path):
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path), ["process-test-resources"])
        assert _keys(executions) == [
            "maven-resources-plugin:resources@default-resources",
            "maven-compiler-plugin:compile@default-compile",
            "maven-resources-plugin:testResources@default-testResources",
        ]
        assert [e.phase for e in executions] == ["process-resources", "compile", "process-test-resources"]

    def test_pom_packaging_has_no_compiler(self, tmp_path):
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, packaging="pom"), ["install"])
        assert _keys(executions) == ["maven-install-plugin:install@default-install"]

    def test_war_packaging(self, tmp_path):
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, packaging="war"), ["package"])
        assert _keys(executions)[-1] == "maven-war-plugin:war@default-war"

    def test_maven_plugin_packaging_generates_descriptor(self, tmp_path):
        session = _session(tmp_path, packaging="maven-plugin")
        executions = DefaultLifecycleExecutor().calculate_plan(session, ["compile"])
        assert _keys(executions)[0] == "maven-plugin-plugin:descriptor@default-descriptor"

    def test_clean_lifecycle(self, tmp_path):
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path), ["clean", "compile"])
        assert _keys(executions)[0] == "maven-clean-plugin:clean@default-clean"
        assert _keys(executions)[-1] == "maven-compiler-plugin:compile@default-compile"

    def test_unknown_phase(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown lifecycle phase"):
            DefaultLifecycleExecutor().calculate_plan(_session(tmp_path), ["compil"])

    def test_unsupported_packaging(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported packaging"):
            DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, packaging="bundle"), ["compile"])


class TestDeclaredPlugins:
    def test_plugin_configuration_applies_to_bindings(self, tmp_path):
        compiler = PluginDeclaration(
            artifact_id="maven-compiler-plugin", version="2.0.2", configuration={"source": "1.6", "target": "1.6"}
        )
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, plugins=[compiler]), ["compile"])
        compile_execution = executions[-1]
        assert compile_execution.version == "2.0.2"
        assert compile_execution.configuration == {"source": "1.6", "target": "1.6"}

    def test_execution_with_default_id_merges_into_binding(self, tmp_path):
        compiler = PluginDeclaration(
            artifact_id="maven-compiler-plugin",
            configuration={"source": "1.5", "target": "1.5"},
            executions=[
                PluginExecutionDeclaration(
                    id="default-compile", goals=["compile"], configuration={"target": "1.6"}
                )
            ],
        )
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, plugins=[compiler]), ["compile"])
        compiles = [e for e in executions if e.goal == "compile"]
        assert len(compiles) == 1
        assert compiles[0].configuration == {"source": "1.5", "target": "1.6"}

    def test_additional_execution_follows_bindings(self, tmp_path):
        compiler = PluginDeclaration(
            artifact_id="maven-compiler-plugin",
            executions=[
                PluginExecutionDeclaration(
                    id="java7", phase="compile", goals=["compile"], configuration={"source": "1.7"}
                )
            ],
        )
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, plugins=[compiler]), ["compile"])
        assert _keys(executions)[-2:] == [
            "maven-compiler-plugin:compile@default-compile",
            "maven-compiler-plugin:compile@java7",
        ]
        assert executions[-1].configuration == {"source": "1.7"}

    def test_execution_bound_to_later_phase_is_excluded(self, tmp_path):
        plugin = PluginDeclaration(
            group_id="org.codehaus.mojo",
            artifact_id="exec-maven-plugin",
            executions=[PluginExecutionDeclaration(id="run", phase="package", goals=["java"])],
        )
        executions = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, plugins=[plugin]), ["compile"])
        assert all(e.artifact_id != "exec-maven-plugin" for e in executions)


class TestDirectInvocations:
    def test_prefix_goal(self, tmp_path):
        (execution,) = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path), ["compiler:testCompile"])
        assert execution.plugin_key == "org.apache.maven.plugins:maven-compiler-plugin"
        assert execution.execution_id == "default-cli"
        assert execution.phase is None

    def test_prefix_of_declared_plugin(self, tmp_path):
        plugin = PluginDeclaration(group_id="org.codehaus.mojo", artifact_id="exec-maven-plugin", version="3.1.0")
        (execution,) = DefaultLifecycleExecutor().calculate_plan(_session(tmp_path, plugins=[plugin]), ["exec:java"])
        assert (execution.group_id, execution.version, execution.goal) == ("org.codehaus.mojo", "3.1.0", "java")

    def test_fully_qualified_goal(self, tmp_path):
        (execution,) = DefaultLifecycleExecutor().calculate_plan(
            _session(tmp_path), ["org.example:tool-plugin:2.0:generate"]
        )
        assert (execution.artifact_id, execution.version, execution.goal) == ("tool-plugin", "2.0", "generate")

    def test_unknown_prefix(self, tmp_path):
        with pytest.raises(ValueError, match="No plugin found for prefix"):
            DefaultLifecycleExecutor().calculate_plan(_session(tmp_path), ["nothing:here"])


class TestConfigurationParameterReader:
    def _execution(self, **configuration):
        return MojoExecution(
            group_id="org.apache.maven.plugins",
            artifact_id="maven-compiler-plugin",
            goal="compile",
            configuration=configuration,
        )

    def test_literal_value(self, tmp_path):
        reader = ConfigurationParameterReader()
        assert reader.read(_session(tmp_path), self._execution(source="1.6"), "source", str) == "1.6"

    def test_expression_from_project_properties(self, tmp_path):
        session = _session(tmp_path, properties={"java.level": "1.5"})
        assert ConfigurationParameterReader().read(session, self._execution(target="${java.level}"), "target", str) == "1.5"

    def test_default_expression_for_unconfigured_compiler_level(self, tmp_path):
        session = _session(tmp_path, properties={"maven.compiler.source": "1.7"})
        assert ConfigurationParameterReader().read(session, self._execution(), "source", str) == "1.7"

    def test_unresolved_expression_is_none(self, tmp_path):
        assert ConfigurationParameterReader().read(_session(tmp_path), self._execution(), "source", str) is None

    def test_user_properties_win(self, tmp_path):
        session = _session(tmp_path, properties={"level": "1.5"})
        session.request.user_properties["level"] = "1.6"
        assert ConfigurationParameterReader().read(session, self._execution(source="${level}"), "source", str) == "1.6"

    def test_project_fields(self, tmp_path):
        execution = self._execution(outputDirectory="${project.build.outputDirectory}")
        value = ConfigurationParameterReader().read(_session(tmp_path), execution, "outputDirectory", str)
        assert value == str(tmp_path / "target" / "classes")

    def test_type_conversion(self, tmp_path):
        reader = ConfigurationParameterReader()
        execution = self._execution(fork="TRUE", maxmem="128", excludes=["**/Old*.java"])
        assert reader.read(None, execution, "fork", bool) is True
        assert reader.read(None, execution, "maxmem", int) == 128
        assert reader.read(None, execution, "excludes", list) == ["**/Old*.java"]
        assert reader.read(None, execution, "maxmem", list) == ["128"]

    def test_bad_conversion(self, tmp_path):
        reader = ConfigurationParameterReader()
        execution = self._execution(maxmem="lots")
        with pytest.raises(ValueError):
            reader.read(None, execution, "maxmem", int)
        with pytest.raises(TypeError):
            reader.read(None, execution, "maxmem", float)

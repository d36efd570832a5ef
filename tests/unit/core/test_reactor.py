"""Unit tests for reactor ordering."""

import pytest

from mvnide.core.errors import CycleError, DuplicateIdError
from mvnide.core.project import Dependency, ProjectModel
from mvnide.core.reactor import ReactorSorter
from mvnide.core.types import ReactorModule


def _module(module_id, *depends_on):
    return ReactorModule(module_id=module_id, depends_on=frozenset(depends_on))


def _ids(modules):
    return [m.module_id for m in modules]


class TestOrder:
    def test_dependencies_come_first(self):
        ordered = ReactorSorter().order([_module("app", "lib"), _module("lib", "core"), _module("core")])
        assert _ids(ordered) == ["core", "lib", "app"]

    def test_independent_modules_keep_input_order(self):
        ordered = ReactorSorter().order([_module("b"), _module("a"), _module("c")])
        assert _ids(ordered) == ["b", "a", "c"]

    def test_ties_broken_by_input_position(self):
        modules = [_module("web", "api"), _module("cli", "api"), _module("api")]
        assert _ids(ReactorSorter().order(modules)) == ["api", "web", "cli"]

    def test_dependencies_outside_reactor_are_ignored(self):
        ordered = ReactorSorter().order([_module("app", "junit:junit"), _module("lib")])
        assert _ids(ordered) == ["app", "lib"]

    def test_empty(self):
        assert ReactorSorter().order([]) == []

    def test_cycle(self):
        with pytest.raises(CycleError) as exc_info:
            ReactorSorter().order([_module("a", "b"), _module("b", "c"), _module("c", "a")])
        assert set(exc_info.value.cycle) == {"a", "b", "c"}

    def test_self_dependency_is_a_cycle(self):
        with pytest.raises(CycleError) as exc_info:
            ReactorSorter().order([_module("a", "a")])
        assert exc_info.value.cycle == ["a"]

    def test_duplicates_checked_before_cycles(self):
        with pytest.raises(DuplicateIdError) as exc_info:
            ReactorSorter().order([_module("a", "b"), _module("b", "a"), _module("a")])
        assert exc_info.value.module_id == "a"


class TestModulesFromProjects:
    def _project(self, artifact_id, dependencies=(), parent=None):
        return ProjectModel(
            group_id="org.example",
            artifact_id=artifact_id,
            version="1.0",
            basedir=f"/work/{artifact_id}",
            parent_group_id="org.example" if parent else None,
            parent_artifact_id=parent,
            dependencies=[Dependency(group_id="org.example", artifact_id=d) for d in dependencies],
        )

    def test_dependencies_and_parent(self):
        modules = ReactorSorter.modules_from_projects(
            [
                self._project("parent"),
                self._project("lib", parent="parent"),
                self._project("app", dependencies=["lib", "external"], parent="parent"),
            ]
        )
        assert {m.module_id: m.depends_on for m in modules} == {
            "org.example:parent": frozenset(),
            "org.example:lib": frozenset({"org.example:parent"}),
            "org.example:app": frozenset({"org.example:lib", "org.example:parent"}),
        }

    def test_self_reference_is_discarded(self):
        (module,) = ReactorSorter.modules_from_projects([self._project("lib", dependencies=["lib"])])
        assert module.depends_on == frozenset()

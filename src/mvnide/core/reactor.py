"""
Reactor Sorter.

Orders the modules of a multi-module build so that every module comes after
the modules it depends on.

Graph Direction:
    Edges point from a module to each module it depends on. The sort walks
    the reversed graph, so dependencies are emitted first. Among modules
    with no remaining ordering constraint the one listed first in the input
    wins, which keeps the output stable.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import networkx as nx

from .errors import CycleError, DuplicateIdError
from .project import ProjectModel
from .types import ReactorModule

logger = logging.getLogger(__name__)


class ReactorSorter:
    """
    Topological sort of reactor modules with cycle detection.

    Example:
        ```python
        sorter = ReactorSorter()
        ordered = sorter.order([
            ReactorModule(module_id="app", depends_on={"lib"}),
            ReactorModule(module_id="lib"),
        ])
        [m.module_id for m in ordered]  # ["lib", "app"]
        ```
    """

    def order(self, modules: Sequence[ReactorModule]) -> List[ReactorModule]:
        """
        Sort ``modules`` dependencies-first.

        Dependencies on ids outside the reactor are ignored.

        Raises:
            DuplicateIdError: If two modules share an id. Checked before
                any cycle detection.
            CycleError: If the modules depend on each other cyclically.
        """
        by_id: Dict[str, ReactorModule] = {}
        position: Dict[str, int] = {}
        for index, module in enumerate(modules):
            if module.module_id in by_id:
                raise DuplicateIdError(module.module_id)
            by_id[module.module_id] = module
            position[module.module_id] = index

        graph = nx.DiGraph()
        graph.add_nodes_from(by_id)
        for module in modules:
            for dependency in module.depends_on:
                if dependency not in by_id:
                    logger.debug(f"{module.module_id}: ignoring dependency {dependency} outside the reactor")
                    continue
                graph.add_edge(module.module_id, dependency)

        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            cycle = None
        if cycle:
            raise CycleError([source for source, _ in cycle])

        ordered = nx.lexicographical_topological_sort(graph.reverse(copy=False), key=position.__getitem__)
        return [by_id[module_id] for module_id in ordered]

    @staticmethod
    def modules_from_projects(projects: Sequence[ProjectModel]) -> List[ReactorModule]:
        """
        Derive reactor modules from projects.

        A project depends on every other reactor project it declares as a
        dependency or as its parent.
        """
        ids = {p.module_id for p in projects}
        modules = []
        for project in projects:
            depends_on = {d.key for d in project.dependencies if d.key in ids}
            if project.parent_group_id and project.parent_artifact_id:
                parent_id = f"{project.parent_group_id}:{project.parent_artifact_id}"
                if parent_id in ids:
                    depends_on.add(parent_id)
            depends_on.discard(project.module_id)
            modules.append(ReactorModule(module_id=project.module_id, depends_on=frozenset(depends_on)))
        return modules

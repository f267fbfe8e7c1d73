"""
Constraint-based plugin ordering.

Each plugin may declare, under a configuration key in its manifest, which
plugins it must come ``before`` and which it must come ``after``:

    {
      "name": "my-plugin",
      "my-app": {"before": ["other-plugin"], "after": ["base-plugin"]}
    }

The constraints become edges of a DependencyGraph whose nodes are the
plugins, in input order. The graph is sorted with Kahn's algorithm, always
taking the earliest-inserted node among those whose predecessors are all
placed, so plugins without a constraint between them keep their input order.
"""

import heapq
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from find_plugins.collector import Candidate
from find_plugins.exceptions import CycleError
from find_plugins.manifest import PackageManifest

logger = logging.getLogger(__name__)


def _as_names(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(item for item in value if isinstance(item, str))
    return ()


@dataclass(frozen=True)
class OrderingConstraint:
    """
    Ordering constraints declared by one plugin.

    Attributes:
        before: Names of plugins this plugin must precede
        after: Names of plugins this plugin must follow
    """

    before: Tuple[str, ...] = ()
    after: Tuple[str, ...] = ()

    @classmethod
    def from_manifest(
        cls, manifest: PackageManifest, config_name: str
    ) -> "OrderingConstraint":
        """
        Read constraints from ``manifest[config_name]``.

        A missing sub-object, or one that is not a JSON object, means no
        constraints.
        """
        config = manifest.get(config_name)
        if not isinstance(config, Mapping):
            return cls()
        return cls(
            before=_as_names(config.get("before")),
            after=_as_names(config.get("after")),
        )


class DependencyGraph:
    """
    Directed graph of plugins, edges meaning "must come before".

    Nodes are stored in insertion order and addressed by their index; that
    index is the tie-break used by ``topsort``.

    Example:
        >>> graph = DependencyGraph()
        >>> graph.add_node("a", plugin_a)
        >>> graph.add_node("b", plugin_b)
        >>> graph.add_edge("b", "a")
        >>> graph.topsort()
        [plugin_b, plugin_a]
    """

    def __init__(self) -> None:
        self._names: List[str] = []
        self._index: Dict[str, int] = {}
        self._payloads: List[Candidate] = []
        self._edges: List[Set[int]] = []

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    @property
    def names(self) -> List[str]:
        """Node names in insertion order."""
        return list(self._names)

    def add_node(self, name: str, payload: Candidate) -> int:
        """
        Add a node, returning its index.

        Adding a name that already exists keeps the node's original position
        and replaces its payload.
        """
        if name in self._index:
            index = self._index[name]
            logger.warning(
                f"Duplicate plugin name '{name}': {payload.location} replaces "
                f"{self._payloads[index].location}"
            )
            self._payloads[index] = payload
            return index

        index = len(self._names)
        self._names.append(name)
        self._index[name] = index
        self._payloads.append(payload)
        self._edges.append(set())
        return index

    def add_edge(self, source: str, target: str) -> bool:
        """
        Require ``source`` to come before ``target``.

        A node required to come before itself is a cycle of one, reported by
        ``topsort``.

        Returns:
            False if either name is not a node, in which case the graph is
            unchanged
        """
        if source not in self._index or target not in self._index:
            logger.debug(f"Ignoring constraint {source} -> {target}: unknown plugin")
            return False

        self._edges[self._index[source]].add(self._index[target])
        return True

    def successors(self, name: str) -> List[str]:
        """Names that must come after ``name``, in insertion order."""
        return [self._names[i] for i in sorted(self._edges[self._index[name]])]

    def topsort(self) -> List[Candidate]:
        """
        Order payloads so that every edge points forward.

        Raises:
            CycleError: If the edges contain a cycle
        """
        in_degree = [0] * len(self._names)
        for targets in self._edges:
            for target in targets:
                in_degree[target] += 1

        ready = [index for index, degree in enumerate(in_degree) if degree == 0]
        heapq.heapify(ready)

        order: List[int] = []
        while ready:
            index = heapq.heappop(ready)
            order.append(index)
            for target in self._edges[index]:
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    heapq.heappush(ready, target)

        if len(order) < len(self._names):
            remaining = [index for index, degree in enumerate(in_degree) if degree > 0]
            raise CycleError(
                [self._names[index] for index in remaining],
                self._find_cycle(remaining),
            )

        return [self._payloads[index] for index in order]

    def _find_cycle(self, remaining: Sequence[int]) -> List[str]:
        """
        Extract one cycle from the nodes topsort could not place.

        Every such node has a predecessor among them, so walking predecessors
        from any of them must revisit a node.
        """
        remaining_set = set(remaining)
        predecessors: Dict[int, List[int]] = {index: [] for index in remaining}
        for source in remaining:
            for target in self._edges[source]:
                if target in remaining_set:
                    predecessors[target].append(source)

        path: List[int] = []
        position: Dict[int, int] = {}
        node = remaining[0]
        while node not in position:
            position[node] = len(path)
            path.append(node)
            node = min(predecessors[node])

        cycle = list(reversed(path[position[node] :]))
        cycle.append(cycle[0])
        return [self._names[index] for index in cycle]

    @classmethod
    def from_plugins(
        cls, plugins: Iterable[Candidate], config_name: str
    ) -> "DependencyGraph":
        """
        Build the graph for ``plugins`` from their declared constraints.

        All nodes are added before any edge so constraints may reference
        plugins that appear later in the input.
        """
        graph = cls()
        declared: List[Tuple[str, OrderingConstraint]] = []

        for plugin in plugins:
            name = plugin_key(plugin)
            graph.add_node(name, plugin)
            declared.append(
                (name, OrderingConstraint.from_manifest(plugin.manifest, config_name))
            )

        for name, constraint in declared:
            for other in constraint.after:
                graph.add_edge(other, name)
            for other in constraint.before:
                graph.add_edge(name, other)

        return graph


def plugin_key(plugin: Candidate) -> str:
    """Graph key of a plugin: its declared name, or its location if unnamed."""
    if plugin.manifest.name:
        return plugin.manifest.name
    return str(plugin.location)


def sort_plugins(plugins: Sequence[Candidate], config_name: str) -> List[Candidate]:
    """
    Order plugins according to their declared before/after constraints.

    Args:
        plugins: Accepted plugins, in discovery order
        config_name: Manifest key holding each plugin's constraints

    Returns:
        The same plugins, each once, in an order satisfying every constraint.
        Plugins without a constraint between them keep their input order.

    Raises:
        CycleError: If the constraints are contradictory
    """
    graph = DependencyGraph.from_plugins(plugins, config_name)
    ordered = graph.topsort()
    logger.debug(f"Sorted {len(ordered)} plugin(s) using '{config_name}' constraints")
    return ordered

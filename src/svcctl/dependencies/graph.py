"""NetworkX view of a dependency chain and the startup order derived from it.

Nodes are service names carrying their discovery index; edges point from
the dependent service to its prerequisite. Duplicate edges collapse into
one, keeping the lowest ``startup_order``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

if TYPE_CHECKING:
    from svcctl.domain.models import ServiceDependency

_Graph: TypeAlias = nx.DiGraph


def build_dependency_graph(root: str, chain: list[ServiceDependency]) -> _Graph:
    """Build a DiGraph from *chain*, with *root* as the first node."""
    g: _Graph = nx.DiGraph()
    g.add_node(root, order=0)

    for dep in chain:
        for name in (dep.source_service, dep.target_service):
            if name and name not in g:
                g.add_node(name, order=g.number_of_nodes())
        if not dep.target_service:
            continue
        u, v = dep.source_service, dep.target_service
        if g.has_edge(u, v):
            data = g.edges[u, v]
            data["startup_order"] = min(data["startup_order"], dep.startup_order)
            data["count"] += 1
        else:
            g.add_edge(
                u,
                v,
                dependency_type=str(dep.dependency_type),
                startup_order=dep.startup_order,
                count=1,
            )
    return g


def _priority(g: _Graph, node: str) -> int:
    """Lowest positive startup_order of edges pointing at *node*; 0 if none."""
    orders = [d["startup_order"] for _, _, d in g.in_edges(node, data=True)]
    positive = [o for o in orders if o > 0]
    return min(positive) if positive else 0


def startup_order(g: _Graph, root: str) -> list[str]:
    """Services to start before *root*, prerequisites first.

    Ties are broken by ascending startup_order, then by discovery order.
    Self-loops are ignored. Raises ``networkx.NetworkXUnfeasible`` on a cycle.
    """
    prereqs_first: _Graph = nx.DiGraph()
    prereqs_first.add_nodes_from(g.nodes(data=True))
    prereqs_first.add_edges_from((v, u) for u, v in g.edges() if u != v)

    def key(node: str) -> tuple[int, int]:
        return (_priority(g, node), g.nodes[node]["order"])

    ordered = nx.lexicographical_topological_sort(prereqs_first, key=key)
    return [n for n in ordered if n != root]

"""
Component analysis over the intra-unit use graph.

Strongly connected components expose cycles: every member of a component
can reach every other member by following uses forward. A component of
size one means "no cycle through this declaration".

Weakly connected components ignore edge direction and reveal clusters of
declarations that are entangled with each other and are usually moved or
documented as one unit. Nodes without edges are singleton components.

Both are computed with networkx's iterative algorithms, so deep graphs do
not hit the interpreter's recursion limit.
"""

from collections.abc import Iterable

import networkx as nx


def strongly_connected_components(uses: nx.DiGraph) -> list[frozenset[str]]:
    """
    Partition every node of uses into strongly connected components.

    Args:
        uses: Directed use graph (edge a -> b means a uses b)

    Returns:
        Disjoint components covering all nodes, in no particular order.
        An empty graph yields an empty list.
    """
    return [frozenset(component) for component in nx.strongly_connected_components(uses)]


def weakly_connected_components(uses: nx.DiGraph) -> list[frozenset[str]]:
    """
    Partition every node of uses into weakly connected components.

    Edge a -> b is treated as the undirected edge a - b. Nodes with no
    edges form singleton components.

    Args:
        uses: Directed use graph

    Returns:
        Disjoint components covering all nodes, in no particular order
    """
    return [frozenset(component) for component in nx.weakly_connected_components(uses)]


def condensation(uses: nx.DiGraph, removed: Iterable[str] = ()) -> nx.DiGraph:
    """
    Build the condensation DAG of uses with some nodes hidden.

    Removed nodes are treated as absent: their edges are ignored and they
    belong to no component. Every remaining node is in exactly one
    component; nodes outside any cycle are singletons.

    Args:
        uses: Directed use graph
        removed: Nodes to hide for this computation only

    Returns:
        A DAG whose nodes are component indices. Each node carries a
        "members" attribute (set of identifiers); graph attribute "mapping"
        maps every remaining identifier to its component index. Edges are
        deduplicated and never self-loops.
    """
    hidden = set(removed)
    view = nx.restricted_view(uses, hidden, []) if hidden else uses
    return nx.condensation(view, scc=strongly_connected_components(view))

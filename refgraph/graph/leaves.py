"""
Leaf/Frontier analysis.

For a set of start identifiers, find their most foundational dependencies:
what remains after peeling away everything that depends on something else.
Consumers use the result to decide what to document or move first.

Algorithm:
    1. Hide the removed identifiers (edges into or out of them are ignored).
    2. Collapse the remaining graph into its condensation DAG.
    3. A terminal component's leaves are its members.
    4. A non-terminal component's leaves are the union of its successors'
       leaves, memoized per component.
    5. If that union is empty, the component's own members are returned.
       Because removed identifiers are hidden before step 2, every terminal
       component has members and this branch is never taken in practice;
       it guards the result shape, not a reachable case.

Every component is evaluated at most once per query, giving O(V + E). The
DAG walk uses an explicit stack.
"""

from collections.abc import Iterable

import networkx as nx

from refgraph.graph.components import condensation


def leaves_of(
    uses: nx.DiGraph,
    starts: Iterable[str],
    removed: Iterable[str] = (),
) -> list[str]:
    """
    Return the leaves reachable from each start identifier.

    Args:
        uses: Directed use graph
        starts: Identifiers to start from. A start that is removed
            contributes nothing; a start unknown to the graph is its own leaf.
        removed: Identifiers treated as absent for this query

    Returns:
        Sorted, deduplicated leaves. Never contains a removed identifier.

    Example:
        >>> g = nx.DiGraph([("A", "B"), ("B", "C"), ("B", "D")])
        >>> leaves_of(g, ["A"], removed=["D"])
        ['C']
    """
    removed_set = frozenset(removed)
    dag = condensation(uses, removed_set)
    mapping: dict[str, int] = dag.graph["mapping"]
    memo: dict[int, frozenset[str]] = {}

    result: set[str] = set()
    for start in starts:
        if start in removed_set:
            continue
        component = mapping.get(start)
        if component is None:
            result.add(start)
            continue
        result |= _component_leaves(dag, component, memo)

    return sorted(result)


def _component_leaves(dag: nx.DiGraph, root: int, memo: dict[int, frozenset[str]]) -> frozenset[str]:
    """Evaluate root and everything below it in post-order, filling memo."""
    if root in memo:
        return memo[root]

    stack = [(root, iter(dag.successors(root)))]
    while stack:
        component, successors = stack[-1]
        for successor in successors:
            if successor not in memo:
                stack.append((successor, iter(dag.successors(successor))))
                break
        else:
            stack.pop()
            memo[component] = _leaves_from_successors(dag, component, memo)

    return memo[root]


def _leaves_from_successors(dag: nx.DiGraph, component: int, memo: dict[int, frozenset[str]]) -> frozenset[str]:
    members = frozenset(dag.nodes[component]["members"])
    successors = list(dag.successors(component))
    if not successors:
        return members

    union = frozenset().union(*(memo[successor] for successor in successors))
    # Unreachable while removed nodes are hidden before condensation.
    if not union:
        return members
    return union

"""
The reference graph of one analysis unit.

This module holds the immutable Graph value produced by the builder:
nodes are top-level declarations, edges are "uses" relationships.

Design Decisions:
    - Intra-unit uses live in a frozen NetworkX DiGraph whose nodes are
      exactly the known identifiers (including those without edges)
    - Cross-unit uses are a read-only mapping to frozensets of ExternalID
    - Import classification is delegated to the resolver's classifier at
      query time, not stored per edge
    - Deriving a reduced graph allocates a new Graph; nothing is mutated
      after construction, so concurrent readers need no locking

Graph Properties:
    - Directed: edges point from the user to the used declaration
    - May have cycles (mutual recursion, self-referencing types)
    - Never has self-loops, even for directly recursive declarations
    - An identifier without outgoing edges and one absent from the edge
      set are indistinguishable
"""

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Optional

import networkx as nx

from refgraph.graph import components, leaves
from refgraph.models import ExternalID, ImportKind

ImportClassifier = Callable[[str], ImportKind]


def _unknown_import(import_path: str) -> ImportKind:
    return ImportKind.UNKNOWN


class Graph:
    """
    Immutable reference graph of one analysis unit.

    Attributes:
        identifiers: Every known identifier
        test_identifiers: Identifiers declared in test-only files
        uses: Read-only NetworkX view of intra-unit uses
        cross_uses: Identifier -> cross-unit references it makes

    Usage:
        graph = Graph(["A", "B", "C"], {"A": ["B"], "B": ["C"]})
        graph.identifiers_from("A")        # ["B"]
        graph.leaves_of(["A"])             # ["C"]
        graph.without_identifiers(["C"])   # new Graph without C
    """

    def __init__(
        self,
        identifiers: Iterable[str] = (),
        intra_uses: Optional[Mapping[str, Iterable[str]]] = None,
        cross_uses: Optional[Mapping[str, Iterable[ExternalID]]] = None,
        test_identifiers: Iterable[str] = (),
        classifier: Optional[ImportClassifier] = None,
    ) -> None:
        """
        Build a graph value and freeze it.

        Edge endpoints, cross-use sources and test identifiers are added to
        the identifier set if missing. Self-edges are dropped, as are empty
        cross-use entries.

        Args:
            identifiers: Known identifiers, including ones without edges
            intra_uses: Identifier -> identifiers it uses
            cross_uses: Identifier -> ExternalIDs it uses
            test_identifiers: Identifiers declared in test-only files
            classifier: Import path classifier used by external_identifiers_from
        """
        uses = nx.DiGraph()
        uses.add_nodes_from(identifiers)
        for source, targets in (intra_uses or {}).items():
            uses.add_node(source)
            uses.add_edges_from((source, target) for target in targets if target != source)

        frozen_cross = {}
        for source, refs in (cross_uses or {}).items():
            refs = frozenset(refs)
            if refs:
                frozen_cross[source] = refs
                uses.add_node(source)

        tests = frozenset(test_identifiers)
        uses.add_nodes_from(tests)

        self._uses: nx.DiGraph = nx.freeze(uses)
        self._identifiers: frozenset[str] = frozenset(uses.nodes)
        self._cross_uses: Mapping[str, frozenset[ExternalID]] = MappingProxyType(frozen_cross)
        self._test_identifiers: frozenset[str] = tests
        self._classifier: ImportClassifier = classifier or _unknown_import

    @property
    def identifiers(self) -> frozenset[str]:
        """All identifiers in the graph, including those without edges."""
        return self._identifiers

    @property
    def test_identifiers(self) -> frozenset[str]:
        """Identifiers declared in test-only files."""
        return self._test_identifiers

    @property
    def uses(self) -> nx.DiGraph:
        """The frozen intra-unit use graph."""
        return self._uses

    @property
    def cross_uses(self) -> Mapping[str, frozenset[ExternalID]]:
        """Read-only mapping of identifier to the cross-unit references it makes."""
        return self._cross_uses

    @property
    def edge_count(self) -> int:
        """Return the number of intra-unit use edges."""
        return self._uses.number_of_edges()

    def __len__(self) -> int:
        return len(self._identifiers)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._identifiers

    def __repr__(self) -> str:
        return f"Graph(identifiers={len(self)}, edges={self.edge_count}, tests={len(self._test_identifiers)})"

    def all_identifiers(self) -> list[str]:
        """Return every identifier, sorted."""
        return sorted(self._identifiers)

    def is_test_identifier(self, identifier: str) -> bool:
        """Check if identifier is declared in a test-only file."""
        return identifier in self._test_identifiers

    # ------------------------------------------------------------------
    # Query accessors
    # ------------------------------------------------------------------

    def identifiers_from(self, identifier: str) -> list[str]:
        """
        Get the identifiers that identifier uses directly.

        Args:
            identifier: The using identifier

        Returns:
            Sorted direct successors; empty if identifier is unknown or has no uses
        """
        if identifier not in self._uses:
            return []
        return sorted(self._uses.successors(identifier))

    def identifiers_to(self, identifier: str) -> list[str]:
        """
        Get the identifiers that use identifier directly.

        Args:
            identifier: The used identifier

        Returns:
            Sorted direct predecessors; empty if identifier is unknown or unused
        """
        if identifier not in self._uses:
            return []
        return sorted(self._uses.predecessors(identifier))

    def external_identifiers_from(
        self,
        identifier: str,
        include_vendor: bool = False,
        include_stdlib: bool = False,
    ) -> list[ExternalID]:
        """
        Get the cross-unit references made by identifier.

        References into the same module are always returned. Vendored and
        standard-library references are returned only when asked for.
        Paths the classifier cannot place are treated as vendored.

        Args:
            identifier: The referencing identifier
            include_vendor: Include third-party (and unclassifiable) references
            include_stdlib: Include standard-library references

        Returns:
            References sorted by import path, then identifier
        """
        refs = self._cross_uses.get(identifier)
        if not refs:
            return []

        result = []
        for ref in refs:
            kind = self._classifier(ref.import_path)
            if kind == ImportKind.MODULE:
                result.append(ref)
            elif kind == ImportKind.STDLIB:
                if include_stdlib:
                    result.append(ref)
            elif include_vendor:
                result.append(ref)

        return sorted(result)

    # ------------------------------------------------------------------
    # Structural queries
    # ------------------------------------------------------------------

    def strongly_connected_components(self) -> list[frozenset[str]]:
        """
        Partition the identifiers into strongly connected components.

        Returns:
            Disjoint components covering every identifier, unordered
        """
        return components.strongly_connected_components(self._uses)

    def weakly_connected_components(self) -> list[frozenset[str]]:
        """
        Partition the identifiers into weakly connected components.

        Returns:
            Disjoint components covering every identifier, unordered
        """
        return components.weakly_connected_components(self._uses)

    def leaves_of(self, starts: Iterable[str], removed: Iterable[str] = ()) -> list[str]:
        """
        Get the most foundational dependencies of starts.

        Args:
            starts: Identifiers to start from
            removed: Identifiers treated as absent for this query

        Returns:
            Sorted leaves, never containing a removed identifier
        """
        return leaves.leaves_of(self._uses, starts, removed)

    # ------------------------------------------------------------------
    # Derived graphs
    # ------------------------------------------------------------------

    def without_test_identifiers(self) -> "Graph":
        """Return a new Graph with every test identifier removed."""
        return self.without_identifiers(self._test_identifiers)

    def without_identifiers(self, identifiers: Iterable[str]) -> "Graph":
        """
        Return a new Graph with identifiers removed.

        Entries whose source is removed are dropped; removed targets
        disappear from the remaining entries. This graph is not modified.

        Args:
            identifiers: Identifiers to remove

        Returns:
            The reduced Graph, sharing this graph's classifier
        """
        removed = frozenset(identifiers)
        kept = self._identifiers - removed
        reduced = self._uses.subgraph(kept)
        return Graph(
            identifiers=kept,
            intra_uses={source: list(reduced.successors(source)) for source in reduced},
            cross_uses={
                source: refs for source, refs in self._cross_uses.items() if source not in removed
            },
            test_identifiers=self._test_identifiers - removed,
            classifier=self._classifier,
        )

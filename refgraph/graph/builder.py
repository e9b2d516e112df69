"""
Graph Builder for refgraph

This module turns one snapshot of resolver output into an immutable Graph.
Each top-level declaration is visited once and contributes its node plus
the identifiers and cross-unit references it uses.

Design Decisions:
    - Functions and methods gather uses from receiver, signature and body
    - Types gather uses from their whole type expression tree
    - Values depend on their explicit type and either the one initializer
      they share with other names, or the initializer at their own position
    - Field accesses depend on the owning named type, not on the field
    - Calls through an interface depend on the interface type
    - Declarations never depend on themselves
    - Unresolved occurrences are skipped: the graph is best effort

Academic Context:
    Input: A ResolvedUnit from a SymbolResolver
    Transformation: Per-declaration use collection, merged into one adjacency
    Output: Graph with intra-unit uses, cross-unit uses and test identifiers
    Limitation: Only what the resolver can name is recorded (no dynamic
        dispatch to unknown implementations, no wildcard imports)
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from refgraph.errors import InconsistentSnapshotError
from refgraph.graph.graph import Graph, ImportClassifier
from refgraph.identifiers import (
    canonical_type_name,
    declaration_identifier,
    func_identifier,
    func_identifier_use,
)
from refgraph.models import (
    Declaration,
    ExternalID,
    FieldAccess,
    FuncDecl,
    ImportedName,
    Reference,
    ResolvedUnit,
    Symbol,
    SymbolKind,
    TypeDecl,
    Use,
    ValueDecl,
)
from refgraph.resolver.base import SymbolResolver

logger = logging.getLogger(__name__)


class GraphBuilder:
    """
    Accumulates nodes and edges for one analysis unit.

    Attributes:
        unit: Import path of the unit being built
        identifiers: Every identifier seen so far
        intra_uses: Identifier -> identifiers it uses
        cross_uses: Identifier -> ExternalIDs it uses
        test_identifiers: Identifiers declared in test files

    Usage:
        builder = GraphBuilder("example.com/shapes")
        builder.add_unit(resolved_unit)
        graph = builder.build(classifier)
    """

    def __init__(self, unit: str) -> None:
        """
        Initialize an empty builder.

        Args:
            unit: Import path of the unit; symbols from any other unit are cross-unit
        """
        self.unit = unit
        self.identifiers: set[str] = set()
        self.intra_uses: dict[str, set[str]] = defaultdict(set)
        self.cross_uses: dict[str, set[ExternalID]] = defaultdict(set)
        self.test_identifiers: set[str] = set()

    def add_unit(self, resolved: ResolvedUnit) -> None:
        """Add every scope name and every declaration of a resolved unit."""
        for name in resolved.scope_names:
            self.identifiers.add(canonical_type_name(name))

        for source_file in resolved.files:
            for declaration in source_file.declarations:
                self.add_declaration(declaration, source_file.is_test)

    def add_declaration(self, declaration: Declaration, is_test: bool = False) -> None:
        """
        Add one declaration and its uses.

        Args:
            declaration: A FuncDecl, TypeDecl or ValueDecl
            is_test: True if the declaration lives in a test-only file
        """
        if isinstance(declaration, FuncDecl):
            self._add_func(declaration, is_test)
        elif isinstance(declaration, TypeDecl):
            key = declaration_identifier(declaration.name, declaration.position)
            self._record(key, declaration.refs, is_test)
        elif isinstance(declaration, ValueDecl):
            self._add_value(declaration, is_test)
        else:
            raise TypeError(f"Unsupported declaration: {declaration!r}")

    def build(self, classifier: Optional[ImportClassifier] = None) -> Graph:
        """Freeze the accumulated state into a Graph."""
        return Graph(
            identifiers=self.identifiers,
            intra_uses=self.intra_uses,
            cross_uses=self.cross_uses,
            test_identifiers=self.test_identifiers,
            classifier=classifier,
        )

    def _add_func(self, decl: FuncDecl, is_test: bool) -> None:
        key = func_identifier(decl.receiver, decl.name, decl.position, decl.repeatable)
        refs = decl.receiver_refs + decl.signature_refs + decl.body_refs
        self._record(key, refs, is_test)

    def _add_value(self, decl: ValueDecl, is_test: bool) -> None:
        for index, value_name in enumerate(decl.names):
            key = declaration_identifier(value_name.name, value_name.position)

            refs: tuple[Reference, ...] = decl.type_refs
            if len(decl.values) == 1:
                # a, b = f(): every name depends on the one expression
                refs += decl.values[0]
            elif index < len(decl.values):
                refs += decl.values[index]

            extra: set[str] = set()
            implicit = value_name.implicit_type
            if (
                decl.kind == SymbolKind.CONST
                and not decl.type_refs
                and not decl.values
                and implicit is not None
                and implicit.kind == SymbolKind.TYPE
                and implicit.unit == self.unit
            ):
                extra.add(canonical_type_name(implicit.name))

            self._record(key, refs, is_test, extra)

    def _record(
        self,
        key: str,
        refs: tuple[Reference, ...],
        is_test: bool,
        extra: Iterable[str] = (),
    ) -> None:
        self.identifiers.add(key)
        if is_test:
            self.test_identifiers.add(key)

        uses, cross = self._collect(refs)
        uses.update(extra)
        for use in uses:
            self.identifiers.add(use)
            if use != key:
                self.intra_uses[key].add(use)
        if cross:
            self.cross_uses[key] |= cross

    def _collect(self, refs: tuple[Reference, ...]) -> tuple[set[str], set[ExternalID]]:
        """Split references into intra-unit identifiers and cross-unit ExternalIDs."""
        uses: set[str] = set()
        cross: set[ExternalID] = set()

        for ref in refs:
            if isinstance(ref, Use):
                symbol = ref.symbol
                if symbol is None or symbol.kind == SymbolKind.TYPE_PARAM or symbol.unit is None:
                    continue
                if symbol.unit != self.unit:
                    cross.add(ExternalID(symbol.unit, self._symbol_key(symbol)))
                    continue
                if symbol.is_method and symbol.receiver.interface:
                    # The implementation is unknown, so depend on the interface.
                    uses.add(canonical_type_name(symbol.receiver.type_name))
                    continue
                if not symbol.package_level and not symbol.is_method:
                    continue
                uses.add(self._symbol_key(symbol))

            elif isinstance(ref, FieldAccess):
                owner = ref.owner
                if (
                    owner is not None
                    and owner.kind == SymbolKind.TYPE
                    and owner.unit == self.unit
                    and owner.package_level
                ):
                    uses.add(canonical_type_name(owner.name))

            elif isinstance(ref, ImportedName):
                if ref.import_path and ref.name:
                    cross.add(ExternalID(ref.import_path, ref.name))

        return uses, cross

    @staticmethod
    def _symbol_key(symbol: Symbol) -> str:
        if symbol.kind == SymbolKind.TYPE:
            return canonical_type_name(symbol.name)
        if symbol.kind == SymbolKind.FUNC:
            return func_identifier_use(symbol.receiver, symbol.name)
        return symbol.name


def resolve_consistent(resolver: SymbolResolver) -> ResolvedUnit:
    """
    Get a consistent snapshot from resolver, reloading once if needed.

    Args:
        resolver: The symbol resolver of the unit

    Returns:
        A ResolvedUnit whose files all come from one snapshot

    Raises:
        InconsistentSnapshotError: If the reloaded unit is still inconsistent
    """
    resolved = resolver.resolve()
    if resolved.consistent:
        return resolved

    logger.warning(
        "Inconsistent snapshot for %s (generations %s); reloading",
        resolved.import_path,
        sorted({f.snapshot for f in resolved.files}),
    )
    resolved = resolver.resolve(reload=True)
    if not resolved.consistent:
        raise InconsistentSnapshotError(
            f"Files of {resolved.import_path} come from different snapshots after reload",
            details={f.name: f.snapshot for f in resolved.files},
        )
    return resolved


def build_graph(resolver: SymbolResolver) -> Graph:
    """
    Build the reference graph of the unit behind resolver.

    Args:
        resolver: Symbol resolver for the unit

    Returns:
        An immutable Graph

    Raises:
        InconsistentSnapshotError: If no consistent snapshot can be obtained

    Example:
        >>> resolver = PythonResolver({"shapes.py": "class A: ...\\nB = A()"}, "shapes")
        >>> build_graph(resolver).identifiers_from("B")
        ['A']
    """
    resolved = resolve_consistent(resolver)
    for file_name, message in resolved.errors:
        logger.warning("Skipped %s while resolving %s: %s", file_name, resolved.import_path, message)

    builder = GraphBuilder(resolved.import_path)
    builder.add_unit(resolved)
    graph = builder.build(resolver.classify_import)

    logger.debug(
        "Built graph for %s: %d identifiers, %d edges, %d test identifiers",
        resolved.import_path,
        len(graph),
        graph.edge_count,
        len(graph.test_identifiers),
    )
    return graph

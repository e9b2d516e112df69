"""
Symbol resolver interface.

The graph engine never parses or type-checks source itself. It asks a
SymbolResolver for one ResolvedUnit (declarations plus the symbol every
identifier occurrence resolves to) and for the classification of import
paths. Any front end can implement the protocol; StaticResolver serves
precomputed snapshots.
"""

from typing import Mapping, Optional, Protocol, runtime_checkable

from refgraph.models import ImportKind, ResolvedUnit


@runtime_checkable
class SymbolResolver(Protocol):
    """Source of resolution data for one analysis unit."""

    def resolve(self, reload: bool = False) -> ResolvedUnit:
        """
        Return resolution data for the unit.

        Args:
            reload: Discard cached per-file results and resolve every file
                again under one fresh snapshot

        Returns:
            The resolved unit
        """
        ...

    def classify_import(self, import_path: str) -> ImportKind:
        """Classify an import path as module-local, vendored, stdlib or unknown."""
        ...


class StaticResolver:
    """
    A resolver over snapshots that were computed ahead of time.

    Attributes:
        unit: The unit returned by resolve()
        reloaded: The unit returned by resolve(reload=True); defaults to unit
        classifications: Import path to ImportKind. Missing paths are UNKNOWN.
        resolve_count: Number of resolve() calls so far

    Usage:
        resolver = StaticResolver(unit, {"fmt": ImportKind.STDLIB})
        graph = build_graph(resolver)
    """

    def __init__(
        self,
        unit: ResolvedUnit,
        classifications: Optional[Mapping[str, ImportKind]] = None,
        reloaded: Optional[ResolvedUnit] = None,
    ) -> None:
        self.unit = unit
        self.reloaded = reloaded if reloaded is not None else unit
        self.classifications = dict(classifications or {})
        self.resolve_count = 0

    def resolve(self, reload: bool = False) -> ResolvedUnit:
        self.resolve_count += 1
        if reload:
            return self.reloaded
        return self.unit

    def classify_import(self, import_path: str) -> ImportKind:
        return self.classifications.get(import_path, ImportKind.UNKNOWN)

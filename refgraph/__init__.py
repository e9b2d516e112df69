"""
refgraph

Reference graphs over the top-level declarations of one analysis unit:
which function, type, constant or variable uses which other one, plus
cycle, cluster and leaf queries over the result.
"""

from refgraph.errors import GraphConstructionError, InconsistentSnapshotError, RefGraphError, ResolutionError
from refgraph.graph import Graph, GraphBuilder, build_graph
from refgraph.models import ExternalID, ImportKind
from refgraph.resolver import PythonResolver

__all__ = [
    "ExternalID",
    "Graph",
    "GraphBuilder",
    "GraphConstructionError",
    "ImportKind",
    "InconsistentSnapshotError",
    "PythonResolver",
    "RefGraphError",
    "ResolutionError",
    "build_graph",
]
__version__ = "0.1.0"

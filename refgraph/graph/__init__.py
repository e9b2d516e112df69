"""
Graph module for refgraph.

This module provides the NetworkX-based reference graph, the builder that
fills it from resolver output, and the component and leaf analyses.
"""

from refgraph.graph.builder import GraphBuilder, build_graph, resolve_consistent
from refgraph.graph.components import (
    condensation,
    strongly_connected_components,
    weakly_connected_components,
)
from refgraph.graph.graph import Graph
from refgraph.graph.leaves import leaves_of

__all__ = [
    "Graph",
    "GraphBuilder",
    "build_graph",
    "condensation",
    "leaves_of",
    "resolve_consistent",
    "strongly_connected_components",
    "weakly_connected_components",
]

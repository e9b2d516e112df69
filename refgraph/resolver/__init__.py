"""
Resolver module for refgraph.

Symbol resolvers turn the sources of one analysis unit into resolved
declarations for the graph builder. The Python resolver is built on LibCST.
"""

from refgraph.resolver.base import StaticResolver, SymbolResolver
from refgraph.resolver.config import ResolverConfig
from refgraph.resolver.imports import PythonImportClassifier, resolve_relative_import
from refgraph.resolver.python import PythonResolver

__all__ = [
    "PythonImportClassifier",
    "PythonResolver",
    "ResolverConfig",
    "StaticResolver",
    "SymbolResolver",
    "resolve_relative_import",
]

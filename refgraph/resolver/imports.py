"""
Import path classification for Python units.

Decides whether an absolute import path belongs to the analysed project,
to the standard library, or to an installed third-party distribution.
"""

import importlib.metadata
import logging
import sys
from functools import cached_property
from typing import Optional

from refgraph.models import ImportKind

logger = logging.getLogger(__name__)


def resolve_relative_import(module: Optional[str], level: int, package: str) -> str:
    """
    Turn a relative import into an absolute dotted path.

    Args:
        module: The dotted module after the dots ("models" in "from ..models import x"), or None
        level: Number of leading dots
        package: Dotted path of the package containing the importing file

    Returns:
        The absolute dotted path. Dots beyond the top-level package are ignored.

    Example:
        >>> resolve_relative_import("models", 2, "app.graph")
        'app.models'
    """
    if level == 0:
        return module or ""
    parts = package.split(".") if package else []
    if level > 1:
        parts = parts[: max(len(parts) - (level - 1), 0)]
    if module:
        parts.append(module)
    return ".".join(parts)


class PythonImportClassifier:
    """
    Classifies absolute import paths seen from one Python unit.

    Classification order:
        1. Same top-level package as the unit -> MODULE
        2. sys.stdlib_module_names -> STDLIB
        3. A top-level name provided by an installed distribution -> VENDOR
        4. Anything else -> UNKNOWN

    Usage:
        classifier = PythonImportClassifier("app.graph")
        classifier.classify("app.models")   # ImportKind.MODULE
        classifier.classify("os.path")      # ImportKind.STDLIB
    """

    def __init__(self, unit_import_path: str) -> None:
        self.unit_import_path = unit_import_path
        self._root = unit_import_path.split(".")[0]

    @cached_property
    def _vendor_roots(self) -> frozenset[str]:
        try:
            return frozenset(importlib.metadata.packages_distributions())
        except Exception as exc:  # broken metadata in the environment
            logger.warning("Could not list installed distributions: %s", exc)
            return frozenset()

    def classify(self, import_path: str) -> ImportKind:
        """Classify one import path."""
        if not import_path:
            return ImportKind.UNKNOWN
        if import_path.startswith("."):
            return ImportKind.MODULE

        root = import_path.split(".")[0]
        if root == self._root:
            return ImportKind.MODULE
        if root in sys.stdlib_module_names:
            return ImportKind.STDLIB
        if root in self._vendor_roots:
            return ImportKind.VENDOR
        return ImportKind.UNKNOWN


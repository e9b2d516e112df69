"""
Custom exceptions for refgraph.

Construction is the only stage that can fail; every graph query is total.
Each exception carries the stage it came from plus a details dict for
callers that want to report the offending files.
"""

from typing import Any, Optional


class RefGraphError(Exception):
    """Base exception for all refgraph errors."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class ResolutionError(RefGraphError):
    """Raised when the symbol resolver cannot produce a snapshot at all."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, stage="Resolution", details=details)


class GraphConstructionError(RefGraphError):
    """Raised when the graph cannot be built from resolver output."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, stage="GraphConstruction", details=details)


class InconsistentSnapshotError(GraphConstructionError):
    """Raised when resolver output mixes files from different snapshots, even after a reload."""

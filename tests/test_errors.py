"""
Tests for the error hierarchy.
"""

from refgraph.errors import (
    GraphConstructionError,
    InconsistentSnapshotError,
    RefGraphError,
    ResolutionError,
)


class TestErrors:
    """Tests for stage-tagged errors."""

    def test_stage_in_message(self):
        """Errors render their stage in front of the message."""
        error = ResolutionError("cannot read models.py", details={"file": "models.py"})

        assert str(error) == "[Resolution] cannot read models.py"
        assert error.details == {"file": "models.py"}
        assert isinstance(error, RefGraphError)

    def test_snapshot_error_is_construction_error(self):
        """Snapshot errors are graph construction errors."""
        error = InconsistentSnapshotError("mixed generations")

        assert isinstance(error, GraphConstructionError)
        assert error.stage == "GraphConstruction"
        assert error.details == {}

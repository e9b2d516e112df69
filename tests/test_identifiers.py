"""
Tests for identifier canonicalization.

Tests the key formats shared by declarations and uses.
"""

import pytest
from refgraph.identifiers import (
    anonymous_identifier,
    anonymous_method_identifier,
    canonical_type_name,
    declaration_identifier,
    func_identifier,
    func_identifier_use,
    is_ambiguous_identifier,
    is_anonymous_identifier,
    is_repeatable_identifier,
    repeatable_identifier,
)
from refgraph.models import Position, ReceiverShape


POS = Position("pkg/shapes.py", 10, 5)


class TestCanonicalTypeName:
    """Tests for canonical_type_name."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Point", "Point"),
            ("Pair[K, V]", "Pair"),
            ("Box[list[int]]", "Box"),
            (" Spaced ", "Spaced"),
        ],
    )
    def test_strips_type_parameters(self, name, expected):
        """Type arguments never reach the key."""
        assert canonical_type_name(name) == expected


class TestFunctionIdentifiers:
    """Tests for function and method keys."""

    def test_plain_function(self):
        """Plain functions are keyed by name."""
        assert func_identifier(None, "distance", POS) == "distance"
        assert func_identifier_use(None, "distance") == "distance"

    def test_method(self):
        """Methods are keyed Type.name, with a star for by-reference receivers."""
        assert func_identifier(ReceiverShape("Square"), "area", POS) == "Square.area"
        assert func_identifier(ReceiverShape("Pair[T]", by_reference=True), "swap", POS) == "*Pair.swap"

    def test_declaration_matches_use(self):
        """A method declared on a generic receiver matches its uses."""
        declared = func_identifier(ReceiverShape("Pair[K, V]"), "keys", POS)
        used = func_identifier_use(ReceiverShape("Pair[int, str]"), "keys")

        assert declared == used

    def test_anonymous_function(self):
        """Anonymous functions carry the base file name and position."""
        assert func_identifier(None, "_", POS) == "_:shapes.py:10:5"
        assert anonymous_identifier(POS) == "_:shapes.py:10:5"

    def test_anonymous_method(self):
        """Anonymous methods keep their receiver."""
        receiver = ReceiverShape("Square", by_reference=True)

        assert func_identifier(receiver, "_", POS) == "*Square._:shapes.py:10:5"
        assert anonymous_method_identifier(receiver, POS) == "*Square._:shapes.py:10:5"

    def test_repeatable(self):
        """Repeatable declarations are qualified by position."""
        assert func_identifier(None, "setup", POS, repeatable=True) == "setup:shapes.py:10:5"
        assert repeatable_identifier("setup", POS) == "setup:shapes.py:10:5"
        assert func_identifier(ReceiverShape("Box"), "get", POS, repeatable=True) == "Box.get:shapes.py:10:5"


class TestDeclarationIdentifiers:
    """Tests for type and value keys."""

    def test_named(self):
        """Named declarations use their canonical name."""
        assert declaration_identifier("Vector[T]", POS) == "Vector"
        assert declaration_identifier("ORIGIN", POS) == "ORIGIN"

    def test_anonymous(self):
        """Blank declarations are keyed by position."""
        assert declaration_identifier("_", POS) == "_:shapes.py:10:5"


class TestClassification:
    """Tests for recognizing ambiguous identifiers."""

    @pytest.mark.parametrize(
        "identifier, anonymous, repeatable",
        [
            ("_:shapes.py:10:5", True, False),
            ("*Square._:shapes.py:10:5", True, False),
            ("setup:shapes.py:10:5", False, True),
            ("Box.get:shapes.py:3:1", False, True),
            ("distance", False, False),
            ("_private", False, False),
            ("Square.area", False, False),
        ],
    )
    def test_classification(self, identifier, anonymous, repeatable):
        """Anonymous and repeatable keys are told apart from plain ones."""
        assert is_anonymous_identifier(identifier) is anonymous
        assert is_repeatable_identifier(identifier) is repeatable
        assert is_ambiguous_identifier(identifier) is (anonymous or repeatable)

"""
Tests for the graph builder.

Uses synthetic resolver output so every rule can be checked without parsing.
"""

import pytest
from refgraph.errors import GraphConstructionError, InconsistentSnapshotError, ResolutionError
from refgraph.graph import GraphBuilder, build_graph, resolve_consistent
from refgraph.models import (
    ExternalID,
    FieldAccess,
    ImportedName,
    ImportKind,
    ReceiverShape,
    ResolvedUnit,
    SourceFile,
    Symbol,
    SymbolKind,
    Use,
    ValueName,
    ValueDecl,
)
from refgraph.resolver import StaticResolver

from tests.fixtures import (
    UNIT,
    func,
    func_symbol,
    make_unit,
    method_symbol,
    position,
    type_decl,
    type_symbol,
    uses,
    value_decl,
    var_symbol,
)


def graph_of(*declarations, **kwargs):
    return build_graph(StaticResolver(make_unit(*declarations, **kwargs)))


class TestFunctions:
    """Tests for function and method declarations."""

    def test_body_and_signature_uses(self):
        """Functions depend on what their signature and body reference."""
        graph = graph_of(
            type_decl("Point"),
            func("distance", signature=uses(type_symbol("Point")), body=uses(func_symbol("helper"))),
            func("helper"),
        )

        assert graph.identifiers_from("distance") == ["Point", "helper"]

    def test_recursion_has_no_self_loop(self):
        """A directly recursive function does not depend on itself."""
        graph = graph_of(func("countdown", body=uses(func_symbol("countdown"))))

        assert "countdown" in graph
        assert graph.identifiers_from("countdown") == []
        assert graph.edge_count == 0

    def test_method_depends_on_receiver(self):
        """Methods are keyed Type.name and depend on their receiver type."""
        graph = graph_of(
            type_decl("Square"),
            func("area", receiver=ReceiverShape("Square")),
        )

        assert graph.identifiers_from("Square.area") == ["Square"]

    def test_by_reference_receiver(self):
        """By-reference receivers are keyed with a leading star."""
        graph = graph_of(func("Scale", receiver=ReceiverShape("Square", by_reference=True)))

        assert "*Square.Scale" in graph

    def test_method_use(self):
        """Calling a method depends on the method identifier."""
        graph = graph_of(
            func("describe", body=uses(method_symbol("Square", "area"))),
            func("area", receiver=ReceiverShape("Square")),
        )

        assert graph.identifiers_from("describe") == ["Square.area"]

    def test_interface_method_use_depends_on_interface(self):
        """Calls through an interface depend on the interface type."""
        graph = graph_of(
            type_decl("Shape"),
            func("largest", body=uses(method_symbol("Shape", "area", interface=True))),
        )

        assert graph.identifiers_from("largest") == ["Shape"]

    def test_anonymous_and_repeatable(self):
        """Anonymous and repeatable functions get position-qualified keys."""
        graph = graph_of(
            func("_", line=3),
            func("setup", line=5, repeatable=True),
            func("setup", line=9, repeatable=True),
            func("_", line=12, receiver=ReceiverShape("Square")),
        )

        assert graph.all_identifiers() == [
            "Square",
            "Square._:shapes.py:12:1",
            "_:shapes.py:3:1",
            "setup:shapes.py:5:1",
            "setup:shapes.py:9:1",
        ]

    def test_generic_type_names_canonical(self):
        """Type arguments are stripped from type keys."""
        graph = graph_of(
            type_decl("Pair[K, V]"),
            func("swap", signature=uses(type_symbol("Pair[int, str]"))),
        )

        assert graph.identifiers_from("swap") == ["Pair"]


class TestSkippedReferences:
    """References that never become edges."""

    def test_unresolved_use_skipped(self):
        """Unresolved occurrences are ignored."""
        graph = graph_of(func("f", body=(Use(None),)))

        assert graph.identifiers_from("f") == []

    def test_type_parameters_skipped(self):
        """Uses of type parameters never produce edges."""
        graph = graph_of(
            func("first", signature=uses(Symbol("T", SymbolKind.TYPE_PARAM, UNIT))),
        )

        assert graph.identifiers_from("first") == []

    def test_builtins_skipped(self):
        """Symbols without a unit are builtins."""
        graph = graph_of(func("f", body=uses(Symbol("len", SymbolKind.FUNC))))

        assert graph.identifiers_from("f") == []

    def test_locals_skipped(self):
        """Non-package-level symbols other than methods are skipped."""
        local = Symbol("tmp", SymbolKind.VAR, UNIT, package_level=False)
        graph = graph_of(func("f", body=uses(local)))

        assert graph.identifiers_from("f") == []


class TestValues:
    """Tests for value declarations."""

    def test_shared_initializer(self):
        """Every name of a multi-name declaration depends on the one shared value."""
        graph = graph_of(
            func("split"),
            value_decl("left", "right", values=[uses(func_symbol("split"))]),
        )

        assert graph.identifiers_from("left") == ["split"]
        assert graph.identifiers_from("right") == ["split"]

    def test_positional_initializers(self):
        """Each name depends on the value at its own position."""
        graph = graph_of(
            value_decl("a", "b", values=[uses(var_symbol("x")), uses(var_symbol("y"))]),
        )

        assert graph.identifiers_from("a") == ["x"]
        assert graph.identifiers_from("b") == ["y"]

    def test_declared_type(self):
        """Values depend on their explicit type."""
        graph = graph_of(
            type_decl("Point"),
            value_decl("ORIGIN", kind=SymbolKind.CONST, type_refs=uses(type_symbol("Point"))),
        )

        assert graph.identifiers_from("ORIGIN") == ["Point"]

    def test_implicit_const_type(self):
        """A constant without type or value depends on its implicit type."""
        decl = ValueDecl(
            kind=SymbolKind.CONST,
            names=(ValueName("GREEN", position(4), implicit_type=type_symbol("Color")),),
        )
        graph = graph_of(type_decl("Color"), decl)

        assert graph.identifiers_from("GREEN") == ["Color"]

    def test_implicit_type_ignored_for_other_units(self):
        """The implicit type only counts when it lives in this unit."""
        decl = ValueDecl(
            kind=SymbolKind.CONST,
            names=(ValueName("GREEN", position(4), implicit_type=type_symbol("Color", unit="palette")),),
        )
        graph = graph_of(decl)

        assert graph.identifiers_from("GREEN") == []
        assert graph.cross_uses == {}

    def test_anonymous_value(self):
        """Blank value names are keyed by position."""
        graph = graph_of(value_decl("_", values=[uses(func_symbol("f"))], line=7))

        assert graph.identifiers_from("_:shapes.py:7:1") == ["f"]


class TestFieldsAndCrossUnit:
    """Tests for field access and cross-unit references."""

    def test_field_access_depends_on_owner(self):
        """Reading a field depends on the named type that owns it."""
        graph = graph_of(
            type_decl("Square"),
            func("side_of", body=(FieldAccess(type_symbol("Square")),)),
        )

        assert graph.identifiers_from("side_of") == ["Square"]

    def test_field_access_unknown_owner(self):
        """Field access on an unknown owner is skipped."""
        graph = graph_of(func("f", body=(FieldAccess(None),)))

        assert graph.identifiers_from("f") == []

    def test_cross_unit_use(self):
        """Symbols of other units become cross-unit references."""
        graph = graph_of(
            func("f", body=uses(func_symbol("hypot", unit="math"), type_symbol("Decimal[int]", unit="decimal"))),
        )

        assert graph.identifiers_from("f") == []
        assert graph.cross_uses["f"] == frozenset({ExternalID("math", "hypot"), ExternalID("decimal", "Decimal")})

    def test_imported_name(self):
        """Qualified selectors through imports become cross-unit references."""
        graph = graph_of(func("f", body=(ImportedName("os.path", "join"),)))

        assert graph.cross_uses["f"] == frozenset({ExternalID("os.path", "join")})

    def test_classifier_comes_from_resolver(self):
        """external_identifiers_from uses the resolver's classification."""
        resolver = StaticResolver(
            make_unit(func("f", body=(ImportedName("os", "sep"), ImportedName("shapes.extra", "X")))),
            classifications={"shapes.extra": ImportKind.MODULE, "os": ImportKind.STDLIB},
        )

        graph = build_graph(resolver)

        assert graph.external_identifiers_from("f") == [ExternalID("shapes.extra", "X")]
        assert len(graph.external_identifiers_from("f", include_stdlib=True)) == 2


class TestUnitLevel:
    """Tests for scope names and test files."""

    def test_scope_names_are_identifiers(self):
        """Every top-level scope name is an identifier even without declarations."""
        graph = graph_of(scope_names=["Orphan", "Box[T]"])

        assert graph.all_identifiers() == ["Box", "Orphan"]

    def test_test_identifiers(self):
        """Declarations from test files are in the graph and flagged."""
        graph = graph_of(
            func("distance"),
            test_declarations=[func("test_distance", body=uses(func_symbol("distance")))],
        )

        assert graph.test_identifiers == frozenset({"test_distance"})
        assert graph.identifiers_from("test_distance") == ["distance"]
        assert graph.without_test_identifiers().all_identifiers() == ["distance"]

    def test_unsupported_declaration(self):
        """Unknown declaration types are rejected."""
        with pytest.raises(TypeError):
            GraphBuilder(UNIT).add_declaration(object())


class TestSnapshots:
    """Tests for snapshot consistency handling."""

    def test_consistent_resolves_once(self):
        """A consistent unit is used as is."""
        resolver = StaticResolver(make_unit(func("f")))

        build_graph(resolver)

        assert resolver.resolve_count == 1

    def test_inconsistent_reloads_once(self, caplog):
        """An inconsistent unit triggers exactly one reload."""
        stale = make_unit(func("f"))
        stale = ResolvedUnit(
            import_path=stale.import_path,
            files=(stale.files[0], SourceFile("other.py", snapshot=1)),
        )
        fresh = make_unit(func("g"), snapshot=2)
        resolver = StaticResolver(stale, reloaded=fresh)

        with caplog.at_level("WARNING"):
            graph = build_graph(resolver)

        assert resolver.resolve_count == 2
        assert graph.all_identifiers() == ["g"]
        assert "reloading" in caplog.text

    def test_still_inconsistent_raises(self):
        """A unit that stays inconsistent after reload is an error."""
        unit = make_unit(func("f"))
        broken = ResolvedUnit(
            import_path=UNIT,
            files=(unit.files[0], SourceFile("other.py", snapshot=3)),
        )
        resolver = StaticResolver(broken)

        with pytest.raises(InconsistentSnapshotError) as excinfo:
            resolve_consistent(resolver)

        assert isinstance(excinfo.value, GraphConstructionError)
        assert excinfo.value.details == {"shapes.py": 0, "other.py": 3}
        assert resolver.resolve_count == 2

    def test_resolver_errors_propagate(self):
        """Resolver failures reach the caller unchanged."""

        class FailingResolver(StaticResolver):
            def resolve(self, reload=False):
                raise ResolutionError("disk on fire")

        with pytest.raises(ResolutionError, match="disk on fire"):
            build_graph(FailingResolver(make_unit()))

    def test_skipped_files_logged(self, caplog):
        """Files the resolver skipped are reported as warnings."""
        unit = make_unit(func("f"))
        unit = ResolvedUnit(import_path=UNIT, files=unit.files, errors=(("bad.py", "syntax error"),))

        with caplog.at_level("WARNING"):
            build_graph(StaticResolver(unit))

        assert "bad.py" in caplog.text

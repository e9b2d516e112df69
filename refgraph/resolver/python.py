"""
LibCST-based Symbol Resolver for Python packages

This module provides a concrete SymbolResolver for one Python package
directory. Every .py file directly inside the directory belongs to the
unit and shares one namespace, so imports between sibling modules resolve
to intra-unit symbols.

Key Components:
    - PythonResolver: Parses files, caches per-file results, produces ResolvedUnit snapshots
    - _UnitTable: Top-level symbols and classes of the whole unit
    - _FileResolver: Turns one parsed file into declarations with references
    - _ReferenceCollector: CST visitor that records the references in a subtree

Design Decisions:
    - Uses LibCST scope analysis (ScopeProvider) to tell module-level names
      from locals, parameters and builtins
    - Methods are declarations of their own ("Class.method") that reference their class
    - `self.attr` resolves to a method of the class (or an intra-unit base class)
      when one exists, otherwise to a field access on the class
    - Classes deriving from Protocol or ABC are interfaces: calls of their
      methods depend on the class, not the method, and the class uses
      whatever its method signatures use
    - Names inside string annotations (forward references) are resolved
    - Module-level TypeVar/ParamSpec/TypeVarTuple names are type parameters
    - @overload signatures are repeatable declarations keyed by position

Academic Context:
    Input: Python sources of one package directory
    Transformation: CST parsing, scope analysis, per-declaration reference collection
    Output: ResolvedUnit snapshots for the graph builder
    Limitation: No type inference. Attribute accesses on arbitrary objects
        and names pulled in by `from x import *` are left unresolved.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import (
    Access,
    Assignment,
    GlobalScope,
    ImportAssignment,
    MetadataWrapper,
    PositionProvider,
    ScopeProvider,
)

from refgraph.errors import ResolutionError
from refgraph.identifiers import ANONYMOUS_NAME
from refgraph.models import (
    Declaration,
    FieldAccess,
    FuncDecl,
    ImportedName,
    ImportKind,
    Position,
    ReceiverShape,
    Reference,
    ResolvedUnit,
    SourceFile,
    Symbol,
    SymbolKind,
    TypeDecl,
    Use,
    ValueDecl,
    ValueName,
)
from refgraph.resolver.config import ResolverConfig
from refgraph.resolver.imports import PythonImportClassifier, resolve_relative_import

logger = logging.getLogger(__name__)

INTERFACE_BASES = frozenset({"Protocol", "ABC"})
INTERFACE_METACLASSES = frozenset({"ABCMeta"})
TYPE_PARAM_FACTORIES = frozenset({"TypeVar", "ParamSpec", "TypeVarTuple"})
TYPE_FACTORIES = frozenset({"NewType", "NamedTuple", "TypedDict"})
CONST_ANNOTATIONS = frozenset({"Final"})
TYPE_ALIAS_ANNOTATIONS = frozenset({"TypeAlias"})
OVERLOAD_DECORATORS = frozenset({"overload"})
STATIC_DECORATORS = frozenset({"staticmethod"})


# ----------------------------------------------------------------------
# CST helpers
# ----------------------------------------------------------------------


def _terminal_name(node: Optional[cst.CSTNode]) -> Optional[str]:
    """Last dotted component of an expression: `typing.Protocol[T]` -> "Protocol"."""
    if isinstance(node, cst.Subscript):
        node = node.value
    if isinstance(node, cst.Call):
        node = node.func
    if isinstance(node, cst.Name):
        return node.value
    if isinstance(node, cst.Attribute):
        return node.attr.value
    return None


def _nested_suites(stmt: cst.CSTNode) -> Iterator[cst.BaseSuite]:
    if isinstance(stmt, cst.If):
        yield stmt.body
        if isinstance(stmt.orelse, cst.If):
            yield from _nested_suites(stmt.orelse)
        elif stmt.orelse is not None:
            yield stmt.orelse.body
    elif isinstance(stmt, cst.Try):
        yield stmt.body
        for handler in stmt.handlers:
            yield handler.body
        if stmt.orelse is not None:
            yield stmt.orelse.body
        if stmt.finalbody is not None:
            yield stmt.finalbody.body
    elif isinstance(stmt, cst.With):
        yield stmt.body


def _iter_statements(statements: Iterable[cst.CSTNode]) -> Iterator[cst.CSTNode]:
    """
    Flatten a statement list into declaration candidates.

    Simple statement lines are split into their small statements and the
    bodies of if/try/with blocks are searched as if they were top level.
    """
    for stmt in statements:
        if isinstance(stmt, cst.SimpleStatementLine):
            yield from stmt.body
        elif isinstance(stmt, (cst.If, cst.Try, cst.With)):
            for suite in _nested_suites(stmt):
                yield from _iter_statements(suite.body)
        else:
            yield stmt


def _target_names(target: cst.BaseExpression) -> list[cst.Name]:
    if isinstance(target, cst.Name):
        return [target]
    if isinstance(target, (cst.Tuple, cst.List)):
        names = []
        for element in target.elements:
            names.extend(_target_names(element.value))
        return names
    if isinstance(target, cst.StarredElement):
        return _target_names(target.value)
    return []


def _has_decorator(node: Union[cst.FunctionDef, cst.ClassDef], names: frozenset[str]) -> bool:
    return any(_terminal_name(decorator.decorator) in names for decorator in node.decorators)


def _is_interface(node: cst.ClassDef) -> bool:
    if any(_terminal_name(base.value) in INTERFACE_BASES for base in node.bases):
        return True
    return any(
        keyword.keyword is not None
        and keyword.keyword.value == "metaclass"
        and _terminal_name(keyword.value) in INTERFACE_METACLASSES
        for keyword in node.keywords
    )


def _is_constant_name(name: str) -> bool:
    return name.isupper()


def _self_parameter(node: cst.FunctionDef) -> Optional[str]:
    """Name of the first positional parameter of a method, None for static methods."""
    if _has_decorator(node, STATIC_DECORATORS):
        return None
    params = list(node.params.posonly_params) + list(node.params.params)
    if not params:
        return None
    return params[0].name.value


def _attribute_chain(node: cst.Attribute) -> Optional[tuple[cst.Name, list[str]]]:
    """Split `a.b.c` into (Name a, ["b", "c"]); None if the base is not a plain name."""
    attrs = []
    current: cst.BaseExpression = node
    while isinstance(current, cst.Attribute):
        attrs.append(current.attr.value)
        current = current.value
    if not isinstance(current, cst.Name):
        return None
    attrs.reverse()
    return current, attrs


class _DottedImportCollector(cst.CSTVisitor):
    """Collects un-aliased `import a.b.c` statements keyed by their root name."""

    def __init__(self) -> None:
        self.imports: dict[str, set[str]] = {}

    def visit_Import(self, node: cst.Import) -> bool:
        for alias in node.names:
            if alias.asname is None:
                dotted = alias.evaluated_name
                self.imports.setdefault(dotted.split(".")[0], set()).add(dotted)
        return False


# ----------------------------------------------------------------------
# Parsed files and the unit-wide symbol table
# ----------------------------------------------------------------------


@dataclass
class _ParsedFile:
    name: str
    snapshot: int
    module: cst.Module
    positions: Mapping[cst.CSTNode, object]
    accesses: dict[cst.CSTNode, list[Access]]
    dotted_imports: dict[str, set[str]]


def _index_accesses(scopes: Mapping[cst.CSTNode, object]) -> dict[cst.CSTNode, list[Access]]:
    """Map nodes to their accesses. A string annotation holds one access per name inside it."""
    unique = {id(scope): scope for scope in scopes.values() if scope is not None}
    index: dict[cst.CSTNode, list[Access]] = {}
    for scope in unique.values():
        for access in scope.accesses:
            index.setdefault(access.node, []).append(access)
    return index


def parse_file(name: str, source: str, snapshot: int = 0) -> _ParsedFile:
    """
    Parse one file and run scope analysis on it.

    Raises:
        libcst.ParserSyntaxError: If the source has syntax errors
    """
    wrapper = MetadataWrapper(cst.parse_module(source))
    scopes = wrapper.resolve(ScopeProvider)
    positions = wrapper.resolve(PositionProvider)
    collector = _DottedImportCollector()
    wrapper.module.visit(collector)
    return _ParsedFile(
        name=name,
        snapshot=snapshot,
        module=wrapper.module,
        positions=positions,
        accesses=_index_accesses(scopes),
        dotted_imports=collector.imports,
    )


@dataclass
class _ClassInfo:
    name: str
    interface: bool = False
    methods: set[str] = field(default_factory=set)
    bases: list[str] = field(default_factory=list)


@dataclass
class _UnitTable:
    """Top-level symbols of every file in the unit."""

    unit: str
    symbols: dict[str, Symbol] = field(default_factory=dict)
    classes: dict[str, _ClassInfo] = field(default_factory=dict)

    @property
    def scope_names(self) -> frozenset[str]:
        return frozenset(name for name in self.symbols if name != ANONYMOUS_NAME)

    @classmethod
    def build(cls, unit: str, files: Iterable[_ParsedFile]) -> "_UnitTable":
        table = cls(unit)
        origins: dict[str, str] = {}
        for parsed in files:
            for stmt in _iter_statements(parsed.module.body):
                for name, kind in table._declared_names(stmt):
                    if name == ANONYMOUS_NAME:
                        continue
                    previous = origins.setdefault(name, parsed.name)
                    if previous != parsed.name:
                        logger.warning(
                            "%s is declared in both %s and %s of %s", name, previous, parsed.name, unit
                        )
                    table.symbols[name] = Symbol(name, kind, unit)
        return table

    def _declared_names(self, stmt: cst.CSTNode) -> list[tuple[str, SymbolKind]]:
        if isinstance(stmt, cst.FunctionDef):
            return [(stmt.name.value, SymbolKind.FUNC)]

        if isinstance(stmt, cst.ClassDef):
            info = _ClassInfo(stmt.name.value, interface=_is_interface(stmt))
            for member in _iter_statements(stmt.body.body):
                if isinstance(member, cst.FunctionDef) and member.name.value != ANONYMOUS_NAME:
                    info.methods.add(member.name.value)
            info.bases = [
                base_name
                for base_name in (_terminal_name(base.value) for base in stmt.bases)
                if base_name is not None
            ]
            self.classes[info.name] = info
            return [(info.name, SymbolKind.TYPE)]

        if isinstance(stmt, cst.Assign):
            factory = _terminal_name(stmt.value.func) if isinstance(stmt.value, cst.Call) else None
            names = [name.value for target in stmt.targets for name in _target_names(target.target)]
            if factory in TYPE_PARAM_FACTORIES:
                return [(name, SymbolKind.TYPE_PARAM) for name in names]
            if factory in TYPE_FACTORIES:
                return [(name, SymbolKind.TYPE) for name in names]
            return [(name, _value_kind(name)) for name in names]

        if isinstance(stmt, cst.AnnAssign) and isinstance(stmt.target, cst.Name):
            name = stmt.target.value
            annotation = _terminal_name(stmt.annotation.annotation)
            if annotation in TYPE_ALIAS_ANNOTATIONS:
                return [(name, SymbolKind.TYPE)]
            if annotation in CONST_ANNOTATIONS:
                return [(name, SymbolKind.CONST)]
            return [(name, _value_kind(name))]

        if isinstance(stmt, cst.TypeAlias):
            return [(stmt.name.value, SymbolKind.TYPE)]

        return []

    def class_symbol(self, name: str) -> Optional[Symbol]:
        symbol = self.symbols.get(name)
        if symbol is None or name not in self.classes:
            return None
        return symbol

    def method_symbol(self, class_name: str, method: str) -> Optional[Symbol]:
        """Find method on class_name or its intra-unit bases, left to right."""
        pending = [class_name]
        seen: set[str] = set()
        while pending:
            current = pending.pop(0)
            if current in seen:
                continue
            seen.add(current)
            info = self.classes.get(current)
            if info is None:
                continue
            if method in info.methods:
                return Symbol(
                    method,
                    SymbolKind.FUNC,
                    self.unit,
                    receiver=ReceiverShape(current, interface=info.interface),
                    package_level=False,
                )
            pending.extend(info.bases)
        return None


def _value_kind(name: str) -> SymbolKind:
    return SymbolKind.CONST if _is_constant_name(name) else SymbolKind.VAR


# ----------------------------------------------------------------------
# Per-file resolution
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class _ModuleBinding:
    """A name bound to a module: (local dotted prefix, module path) pairs, longest first."""

    prefixes: tuple[tuple[str, str], ...]


class _ReferenceCollector(cst.CSTVisitor):
    """
    CST Visitor that records the references made inside one subtree.

    Usage:
        collector = _ReferenceCollector(file_resolver)
        node.visit(collector)
        collector.refs
    """

    def __init__(
        self,
        resolver: "_FileResolver",
        owner: Optional[_ClassInfo] = None,
        self_name: Optional[str] = None,
    ) -> None:
        self.resolver = resolver
        self.owner = owner
        self.self_name = self_name
        self.refs: list[Reference] = []

    def visit_Name(self, node: cst.Name) -> None:
        ref = self.resolver.resolve_name(node)
        if ref is not None:
            self.refs.append(ref)

    def visit_Attribute(self, node: cst.Attribute) -> bool:
        chain = _attribute_chain(node)
        if chain is None:
            return True
        base, attrs = chain
        self.refs.extend(self.resolver.resolve_chain(base, attrs, self.owner, self.self_name))
        self.visit_Name(base)
        return False

    def visit_SimpleString(self, node: cst.SimpleString) -> None:
        self.refs.extend(self.resolver.resolve_annotation_string(node))

    def visit_ConcatenatedString(self, node: cst.ConcatenatedString) -> None:
        self.refs.extend(self.resolver.resolve_annotation_string(node))


class _FileResolver:
    """Produces the declarations of one parsed file."""

    def __init__(
        self,
        parsed: _ParsedFile,
        table: _UnitTable,
        module_names: frozenset[str],
        is_test: bool,
    ) -> None:
        self.parsed = parsed
        self.table = table
        self.unit = table.unit
        self.module_names = module_names
        self.is_test = is_test

    def resolve(self) -> SourceFile:
        declarations: list[Declaration] = []
        for stmt in _iter_statements(self.parsed.module.body):
            declarations.extend(self._declarations(stmt))
        return SourceFile(
            name=self.parsed.name,
            is_test=self.is_test,
            snapshot=self.parsed.snapshot,
            declarations=tuple(declarations),
        )

    # -- declarations --------------------------------------------------

    def _declarations(self, stmt: cst.CSTNode) -> list[Declaration]:
        if isinstance(stmt, cst.FunctionDef):
            return [self._function(stmt)]
        if isinstance(stmt, cst.ClassDef):
            return self._class(stmt)
        if isinstance(stmt, cst.Assign):
            return self._assign(stmt)
        if isinstance(stmt, cst.AnnAssign) and isinstance(stmt.target, cst.Name):
            return [self._ann_assign(stmt)]
        if isinstance(stmt, cst.TypeAlias):
            refs = self._collect(stmt.type_parameters, stmt.value)
            return [TypeDecl(stmt.name.value, self._position(stmt.name), refs)]
        return []

    def _function(self, node: cst.FunctionDef, owner: Optional[_ClassInfo] = None) -> FuncDecl:
        receiver = None
        receiver_refs: tuple[Reference, ...] = ()
        self_name = None
        if owner is not None:
            receiver = ReceiverShape(owner.name, interface=owner.interface)
            receiver_refs = (Use(self.table.class_symbol(owner.name)),)
            self_name = _self_parameter(node)

        signature_refs = self._collect(
            *node.decorators,
            node.type_parameters,
            node.params,
            node.returns,
            owner=owner,
            self_name=self_name,
        )
        body_refs = self._collect(node.body, owner=owner, self_name=self_name)
        return FuncDecl(
            name=node.name.value,
            position=self._position(node.name),
            receiver=receiver,
            repeatable=_has_decorator(node, OVERLOAD_DECORATORS),
            receiver_refs=receiver_refs,
            signature_refs=signature_refs,
            body_refs=body_refs,
        )

    def _class(self, node: cst.ClassDef) -> list[Declaration]:
        owner = self.table.classes.get(node.name.value) or _ClassInfo(node.name.value)
        members = list(_iter_statements(node.body.body))
        refs = self._collect(
            *node.decorators,
            node.type_parameters,
            *node.bases,
            *node.keywords,
            *(member for member in members if not isinstance(member, cst.FunctionDef)),
        )
        if owner.interface:
            # Interface method signatures belong to the class.
            for member in members:
                if isinstance(member, cst.FunctionDef):
                    refs += self._collect(
                        *member.decorators,
                        member.type_parameters,
                        member.params,
                        member.returns,
                    )
        declarations: list[Declaration] = [TypeDecl(node.name.value, self._position(node.name), refs)]
        for member in members:
            if isinstance(member, cst.FunctionDef):
                declarations.append(self._function(member, owner))
        return declarations

    def _assign(self, node: cst.Assign) -> list[Declaration]:
        targets = [target.target for target in node.targets]
        value = node.value

        if (
            len(targets) == 1
            and isinstance(targets[0], (cst.Tuple, cst.List))
            and isinstance(value, (cst.Tuple, cst.List))
            and len(targets[0].elements) == len(value.elements)
            and all(isinstance(e, cst.Element) and isinstance(e.value, cst.Name) for e in targets[0].elements)
            and all(isinstance(e, cst.Element) for e in value.elements)
        ):
            # a, b = x, y: each name gets its own expression
            names = [element.value for element in targets[0].elements]
            values = tuple(self._collect(element.value) for element in value.elements)
        else:
            names = [name for target in targets for name in _target_names(target)]
            values = (self._collect(value),)

        if not names:
            return []

        kinds = {self._kind(name.value) for name in names}
        if len(names) == 1 and kinds == {SymbolKind.TYPE}:
            return [TypeDecl(names[0].value, self._position(names[0]), values[0])]

        kind = SymbolKind.CONST if kinds == {SymbolKind.CONST} else SymbolKind.VAR
        return [
            ValueDecl(
                kind=kind,
                names=tuple(ValueName(name.value, self._position(name)) for name in names),
                values=values,
            )
        ]

    def _ann_assign(self, node: cst.AnnAssign) -> Declaration:
        name = node.target
        kind = self._kind(name.value)
        if kind == SymbolKind.TYPE:
            refs = self._collect(node.annotation, node.value)
            return TypeDecl(name.value, self._position(name), refs)

        values = (self._collect(node.value),) if node.value is not None else ()
        return ValueDecl(
            kind=SymbolKind.CONST if kind == SymbolKind.CONST else SymbolKind.VAR,
            names=(ValueName(name.value, self._position(name)),),
            type_refs=self._collect(node.annotation),
            values=values,
        )

    def _kind(self, name: str) -> SymbolKind:
        symbol = self.table.symbols.get(name)
        if symbol is None:
            return _value_kind(name)
        return symbol.kind

    def _position(self, node: cst.CSTNode) -> Position:
        start = self.parsed.positions[node].start
        return Position(self.parsed.name, start.line, start.column + 1)

    def _collect(
        self,
        *nodes: Optional[cst.CSTNode],
        owner: Optional[_ClassInfo] = None,
        self_name: Optional[str] = None,
    ) -> tuple[Reference, ...]:
        collector = _ReferenceCollector(self, owner, self_name)
        for node in nodes:
            if node is not None:
                node.visit(collector)
        return tuple(collector.refs)

    # -- name resolution -----------------------------------------------

    def resolve_name(self, node: cst.Name) -> Optional[Reference]:
        """
        Resolve one name occurrence.

        Returns:
            A Use or ImportedName, Use(None) for names nothing defines, or
            None for names that are not references to top-level symbols
            (locals, parameters, builtins, modules)
        """
        accesses = self.parsed.accesses.get(node)
        if not accesses:
            return None
        return self.resolve_access(accesses[0])

    def resolve_annotation_string(self, node: cst.BaseString) -> list[Reference]:
        """Resolve every name inside a forward-reference annotation such as 'dict[Node, Leaf]'."""
        refs = []
        for access in self.parsed.accesses.get(node, ()):
            ref = self.resolve_access(access)
            if ref is not None:
                refs.append(ref)
        return refs

    def resolve_access(self, access: Access) -> Optional[Reference]:
        if not access.referents:
            return Use(None)

        for referent in access.referents:
            if isinstance(referent, ImportAssignment):
                binding = self._import_binding(referent)
                if isinstance(binding, _ModuleBinding):
                    return None
                return binding
            if isinstance(referent, Assignment) and isinstance(referent.scope, GlobalScope):
                return Use(self.table.symbols.get(referent.name))
        return None

    def resolve_chain(
        self,
        base: cst.Name,
        attrs: list[str],
        owner: Optional[_ClassInfo],
        self_name: Optional[str],
    ) -> list[Reference]:
        """Resolve the attribute part of `base.attr1.attr2...`."""
        accesses = self.parsed.accesses.get(base)
        referents = accesses[0].referents if accesses else ()

        if (
            owner is not None
            and self_name is not None
            and base.value == self_name
            and not any(isinstance(r.scope, GlobalScope) for r in referents)
        ):
            method = self.table.method_symbol(owner.name, attrs[0])
            if method is not None:
                return [Use(method)]
            return [FieldAccess(self.table.class_symbol(owner.name))]

        if not referents:
            if base.value in self.parsed.dotted_imports:
                return self._module_member(self._dotted_binding(base.value), base.value, attrs)
            return []

        for referent in referents:
            if isinstance(referent, ImportAssignment):
                binding = self._import_binding(referent)
                if isinstance(binding, _ModuleBinding):
                    return self._module_member(binding, base.value, attrs)
                if isinstance(binding, Use) and binding.symbol is not None:
                    return self._class_member(binding.symbol.name, attrs[0])
                return []
            if isinstance(referent, Assignment) and isinstance(referent.scope, GlobalScope):
                return self._class_member(referent.name, attrs[0])
        return []

    def _class_member(self, class_name: str, attr: str) -> list[Reference]:
        if class_name not in self.table.classes:
            return []
        method = self.table.method_symbol(class_name, attr)
        return [Use(method)] if method is not None else []

    def _module_member(self, binding: _ModuleBinding, base: str, attrs: list[str]) -> list[Reference]:
        dotted = ".".join([base, *attrs])
        for local, module in binding.prefixes:
            if not dotted.startswith(local + "."):
                continue
            remaining = dotted[len(local) + 1 :].split(".")
            if not self._is_intra(module):
                return [ImportedName(module, remaining[0])]
            symbol = self.table.symbols.get(remaining[0])
            if symbol is None:
                return [Use(None)]
            refs: list[Reference] = [Use(symbol)]
            if len(remaining) > 1:
                refs.extend(self._class_member(symbol.name, remaining[1]))
            return refs
        return []

    def _dotted_binding(self, root: str) -> _ModuleBinding:
        dotted = sorted(self.parsed.dotted_imports.get(root, ()) | {root}, key=len, reverse=True)
        return _ModuleBinding(tuple((path, path) for path in dotted))

    def _import_binding(self, referent: ImportAssignment) -> Union[Reference, _ModuleBinding, None]:
        node = referent.node
        bound = referent.name

        if isinstance(node, cst.ImportFrom):
            if isinstance(node.names, cst.ImportStar):
                return None
            module = get_full_name_for_node(node.module) if node.module is not None else None
            absolute = resolve_relative_import(module, len(node.relative), self.unit)
            for alias in node.names:
                if (alias.evaluated_alias or alias.evaluated_name) == bound:
                    return self._from_import(absolute, alias.evaluated_name, bound)
            return None

        if isinstance(node, cst.Import):
            root = bound.split(".")[0]
            for alias in node.names:
                if alias.evaluated_alias == bound:
                    return _ModuleBinding(((bound, alias.evaluated_name),))
            return self._dotted_binding(root)

        return None

    def _from_import(self, module: str, name: str, bound: str) -> Union[Reference, _ModuleBinding]:
        if not self._is_intra(module):
            return ImportedName(module, name)
        symbol = self.table.symbols.get(name)
        if symbol is not None:
            return Use(symbol)
        if module == self.unit and name in self.module_names:
            return _ModuleBinding(((bound, f"{self.unit}.{name}"),))
        return Use(None)

    def _is_intra(self, module: str) -> bool:
        if module == self.unit:
            return True
        prefix = self.unit + "."
        return module.startswith(prefix) and module[len(prefix) :] in self.module_names


# ----------------------------------------------------------------------
# Public resolver
# ----------------------------------------------------------------------


def _read_sources(directory: Path, config: ResolverConfig) -> dict[str, str]:
    sources = {}
    for path in sorted(directory.glob("*.py")):
        if not path.is_file() or config.is_excluded(path.name):
            continue
        try:
            sources[path.name] = path.read_text(encoding=config.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise ResolutionError(f"Cannot read {path}: {exc}", details={"file": str(path)}) from exc
    return sources


class PythonResolver:
    """
    SymbolResolver for one Python package directory.

    Files are parsed lazily and cached with the snapshot generation they
    were parsed under. refresh_file() re-parses a single file under a new
    generation, which leaves the cached unit inconsistent until the next
    resolve(reload=True).

    Attributes:
        import_path: Dotted import path of the package
        config: File discovery settings
        root: Directory the sources were read from, if any
        classifier: Import path classifier for this unit

    Usage:
        resolver = PythonResolver.from_directory("src/shapes", import_path="shapes")
        graph = build_graph(resolver)
    """

    def __init__(
        self,
        sources: Mapping[str, str],
        import_path: str,
        config: Optional[ResolverConfig] = None,
        root: Optional[Path] = None,
    ) -> None:
        """
        Initialize the resolver over in-memory sources.

        Args:
            sources: File name -> Python source
            import_path: Dotted import path of the unit
            config: File discovery settings
            root: Directory to re-read sources from on reload
        """
        self.import_path = import_path
        self.config = config or ResolverConfig()
        self.root = Path(root) if root is not None else None
        self.classifier = PythonImportClassifier(import_path)
        self._sources: dict[str, str] = dict(sources)
        self._parsed: dict[str, _ParsedFile] = {}
        self._errors: dict[str, str] = {}
        self._snapshot = 0

    @classmethod
    def from_directory(
        cls,
        directory: Union[Path, str],
        import_path: Optional[str] = None,
        config: Optional[ResolverConfig] = None,
    ) -> "PythonResolver":
        """
        Create a resolver for the .py files directly inside directory.

        Args:
            directory: The package directory
            import_path: Dotted import path; defaults to the directory name
            config: File discovery settings

        Raises:
            ResolutionError: If the directory is missing or a file cannot be read
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ResolutionError(f"Not a directory: {directory}", details={"directory": str(directory)})
        config = config or ResolverConfig()
        return cls(
            _read_sources(directory, config),
            import_path or directory.name,
            config=config,
            root=directory,
        )

    @property
    def module_names(self) -> frozenset[str]:
        """Sibling module names of the unit (file stems, without __init__)."""
        return frozenset(Path(name).stem for name in self._sources if Path(name).stem != "__init__")

    def classify_import(self, import_path: str) -> ImportKind:
        return self.classifier.classify(import_path)

    def refresh_file(self, name: str, source: str) -> None:
        """
        Replace one file's source and re-parse only that file.

        Args:
            name: File name as used in sources
            source: New source text
        """
        self._sources[name] = source
        self._snapshot += 1
        self._parse(name)

    def resolve(self, reload: bool = False) -> ResolvedUnit:
        """
        Resolve every file of the unit.

        Args:
            reload: Re-read sources (when created from a directory) and
                re-parse every file under one new snapshot

        Returns:
            The resolved unit. Files that fail to parse are listed in errors.
        """
        if reload:
            if self.root is not None:
                self._sources = _read_sources(self.root, self.config)
            self._snapshot += 1
            self._parsed.clear()
            self._errors.clear()

        for name in sorted(self._sources):
            if name not in self._parsed and name not in self._errors:
                self._parse(name)

        parsed_files = [self._parsed[name] for name in sorted(self._parsed)]
        table = _UnitTable.build(self.import_path, parsed_files)
        module_names = self.module_names
        files = tuple(
            _FileResolver(
                parsed,
                table,
                module_names,
                self.config.is_test_file(Path(parsed.name).name),
            ).resolve()
            for parsed in parsed_files
        )
        return ResolvedUnit(
            import_path=self.import_path,
            scope_names=table.scope_names,
            files=files,
            errors=tuple(sorted(self._errors.items())),
        )

    def _parse(self, name: str) -> None:
        self._parsed.pop(name, None)
        self._errors.pop(name, None)
        try:
            self._parsed[name] = parse_file(name, self._sources[name], self._snapshot)
        except cst.ParserSyntaxError as exc:
            logger.warning("Cannot parse %s: %s", name, exc.message)
            self._errors[name] = exc.message

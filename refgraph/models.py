"""
Core Data Models for refgraph

This module defines the canonical data structures shared by the resolver
and the graph engine:
- Symbol: What an identifier occurrence resolves to
- Reference: A single use discovered inside a declaration (Use, FieldAccess, ImportedName)
- Declaration: A top-level function, type, or value declaration with its references
- ResolvedUnit: One consistent snapshot of resolver output for an analysis unit
- ExternalID: A cross-unit reference as (import path, identifier)

These models are designed to be:
- Immutable (frozen dataclasses, tuples instead of lists)
- Language-neutral: any front end that can name symbols can produce them
- Small enough to write by hand in tests
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SymbolKind(Enum):
    """
    Kind of the declaration a symbol names.

    States:
        FUNC: A function or method.
        TYPE: A named type (class, struct, interface, alias).
        VAR: A variable.
        CONST: A constant.
        TYPE_PARAM: A generic type parameter. Never produces edges.
    """

    FUNC = "func"
    TYPE = "type"
    VAR = "var"
    CONST = "const"
    TYPE_PARAM = "type_param"


class ImportKind(Enum):
    """
    Classification of an import path relative to the analysed unit.

    States:
        MODULE: Part of the same module/project as the unit.
        VENDOR: Third-party code.
        STDLIB: The language's standard library.
        UNKNOWN: The classifier could not place the path. Queries treat it as VENDOR.
    """

    MODULE = "module"
    VENDOR = "vendor"
    STDLIB = "stdlib"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ReceiverShape:
    """
    The receiver of a method.

    Attributes:
        type_name: Name of the receiver's type. May carry a type-parameter
            list (e.g. "Pair[T]"); canonicalization strips it.
        by_reference: True for by-reference receivers ("*T.M" keys)
        interface: True when the receiver type is an interface/protocol, so
            calls cannot be bound to one concrete implementation
    """

    type_name: str
    by_reference: bool = False
    interface: bool = False


@dataclass(frozen=True)
class Symbol:
    """
    The symbol an identifier occurrence resolves to.

    Attributes:
        name: Declared name of the symbol
        kind: What kind of declaration it is
        unit: Import path of the defining unit; None for builtins
        receiver: Receiver shape if the symbol is a method
        package_level: True if declared at the top level of its unit
            (methods are reachable through their receiver either way)
    """

    name: str
    kind: SymbolKind
    unit: Optional[str] = None
    receiver: Optional[ReceiverShape] = None
    package_level: bool = True

    @property
    def is_method(self) -> bool:
        """Check if this symbol is a method."""
        return self.kind == SymbolKind.FUNC and self.receiver is not None


@dataclass(frozen=True)
class Position:
    """
    Location of a declaration's name token.

    Attributes:
        file: File name (directories are dropped when forming identifiers)
        line: 1-indexed line
        column: 1-indexed column
    """

    file: str
    line: int
    column: int


@dataclass(frozen=True)
class Use:
    """An identifier occurrence. symbol is None when resolution failed."""

    symbol: Optional[Symbol]


@dataclass(frozen=True)
class FieldAccess:
    """
    A field selection `x.field` (not a method call).

    Fields are not graph nodes, so the access counts as a use of the named
    type `x` resolves through. Resolvers unwrap references before filling
    owner: `self.side` inside a method of Square has owner Square.

    Attributes:
        owner: The named type `x` resolves through, None if unknown
    """

    owner: Optional[Symbol]


@dataclass(frozen=True)
class ImportedName:
    """A qualified selector `pkg.Name` through an import of another unit."""

    import_path: str
    name: str


Reference = Union[Use, FieldAccess, ImportedName]


@dataclass(frozen=True)
class FuncDecl:
    """
    A top-level function or a method.

    Attributes:
        name: Declared name ("_" for anonymous)
        position: Position of the name token
        receiver: Receiver shape for methods, None for plain functions
        repeatable: True for entry points that may legally be declared many
            times (keyed by position instead of name)
        receiver_refs: References made by the receiver type expression
        signature_refs: References made by type parameters, parameters and results
        body_refs: References made by the body
    """

    name: str
    position: Position
    receiver: Optional[ReceiverShape] = None
    repeatable: bool = False
    receiver_refs: tuple[Reference, ...] = ()
    signature_refs: tuple[Reference, ...] = ()
    body_refs: tuple[Reference, ...] = ()


@dataclass(frozen=True)
class TypeDecl:
    """A type declaration and every reference in its type expression tree."""

    name: str
    position: Position
    refs: tuple[Reference, ...] = ()


@dataclass(frozen=True)
class ValueName:
    """
    One name bound by a value declaration.

    Attributes:
        name: Declared name ("_" for anonymous)
        position: Position of the name token
        implicit_type: For names with neither explicit type nor value (an
            implicitly continued constant sequence), the named type the
            sequence established, if known
    """

    name: str
    position: Position
    implicit_type: Optional[Symbol] = None


@dataclass(frozen=True)
class ValueDecl:
    """
    A variable or constant declaration binding one or more names.

    When len(values) == 1 every name depends on that single expression
    (tuple-style multi-return). Otherwise names[i] depends on values[i].

    Attributes:
        kind: SymbolKind.VAR or SymbolKind.CONST
        names: The bound names, in source order
        type_refs: References made by the explicit type annotation
        values: References made by each initializer expression
    """

    kind: SymbolKind
    names: tuple[ValueName, ...]
    type_refs: tuple[Reference, ...] = ()
    values: tuple[tuple[Reference, ...], ...] = ()


Declaration = Union[FuncDecl, TypeDecl, ValueDecl]


@dataclass(frozen=True)
class SourceFile:
    """
    Resolver output for one file.

    Attributes:
        name: File name or path
        is_test: True if the file holds test-only code
        snapshot: Generation of the parse this file came from
        declarations: Top-level declarations, in source order
    """

    name: str
    is_test: bool = False
    snapshot: int = 0
    declarations: tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class ResolvedUnit:
    """
    Resolver output for one analysis unit.

    Attributes:
        import_path: Import path of the unit
        scope_names: Top-level names declared in the unit's scope
        files: Per-file resolution results
        errors: (file, message) pairs for files the resolver had to skip

    Invariants:
        - All files must come from the same snapshot for the unit to be usable
    """

    import_path: str
    scope_names: frozenset[str] = frozenset()
    files: tuple[SourceFile, ...] = ()
    errors: tuple[tuple[str, str], ...] = ()

    @property
    def consistent(self) -> bool:
        """True when every file carries the same snapshot generation."""
        return len({f.snapshot for f in self.files}) <= 1


@dataclass(frozen=True, order=True)
class ExternalID:
    """
    A symbol defined in another analysis unit.

    Attributes:
        import_path: Import path as written from the referencing unit
        identifier: Canonical identifier inside the other unit
    """

    import_path: str
    identifier: str

    def __str__(self) -> str:
        return f"{self.import_path}.{self.identifier}"

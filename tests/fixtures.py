"""
Test fixtures for refgraph.

This module provides sample Python packages for the resolver tests and
helpers that build small synthetic resolver outputs for the builder tests.
"""

from refgraph.models import (
    FuncDecl,
    Position,
    ReceiverShape,
    ResolvedUnit,
    SourceFile,
    Symbol,
    SymbolKind,
    TypeDecl,
    Use,
    ValueDecl,
    ValueName,
)

UNIT = "shapes"

# ----------------------------------------------------------------------
# Sample Python sources
# ----------------------------------------------------------------------

SHAPES_MODELS = '''
from dataclasses import dataclass
from typing import Protocol, TypeVar

T = TypeVar("T")
MAX_SIDES = 12


class Shape(Protocol):
    def area(self) -> float: ...

    def summary(self) -> str:
        return str(self.area())


@dataclass
class Point:
    x: float
    y: float


class Square:
    def __init__(self, corner: Point, side: float):
        self.corner = corner
        self.side = side

    def area(self) -> float:
        return self.side * self.side

    def scaled(self, factor: float) -> "Square":
        return Square(self.corner, self.side * factor)

    def describe(self):
        return f"square of area {self.area()}"


class Cube(Square):
    def volume(self):
        return self.area() * self.side


def largest(shapes: list[Shape]) -> Shape:
    return max(shapes, key=lambda s: s.area())


def first(items: list[T]) -> T:
    return items[0]
'''

SHAPES_GEOMETRY = '''
import math
import os.path
from typing import Final, NewType, TypeAlias

from .models import MAX_SIDES, Point, Square, largest

Meters = NewType("Meters", float)
Polygon: TypeAlias = list[Point]
default_scale: Final = 1.0

ORIGIN = Point(0, 0)
UNIT_SQUARE = Square(ORIGIN, 1)
left, right = Point(-1, 0), Point(1, 0)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def biggest(squares):
    if len(squares) > MAX_SIDES:
        raise ValueError(os.path.sep)
    return largest(squares)


def countdown(n):
    if n > 0:
        return countdown(n - 1)
    return n
'''

SHAPES_TEST = '''
from shapes.geometry import distance
from shapes.models import Point


def test_distance():
    assert distance(Point(0, 0), Point(3, 4)) == 5
'''

OVERLOADED = '''
from typing import overload


@overload
def parse(value: int) -> int: ...
@overload
def parse(value: str) -> str: ...
def parse(value):
    return value


def use_parse():
    return parse(1)
'''

CYCLIC = '''
def ping(n):
    return pong(n - 1) if n else 0


def pong(n):
    return ping(n - 1) if n else 0


def standalone():
    return 1
'''

BROKEN = '''
def broken(:
    pass
'''

STORE = '''
from typing import Protocol


class Item:
    pass


class Store(Protocol):
    def get(self) -> Item: ...


def use(s: Store):
    return s.get()
'''

FORWARD_REFS = '''
class Node:
    def child(self) -> "Leaf": ...


def make(x: "Leaf") -> "dict[Node, Leaf]":
    return {}


class Leaf:
    pass
'''

# ----------------------------------------------------------------------
# Synthetic resolver output
# ----------------------------------------------------------------------


def position(line: int, column: int = 1, file: str = "shapes.py") -> Position:
    """Position helper."""
    return Position(file, line, column)


def type_symbol(name: str, unit: str = UNIT) -> Symbol:
    return Symbol(name, SymbolKind.TYPE, unit)


def func_symbol(name: str, unit: str = UNIT) -> Symbol:
    return Symbol(name, SymbolKind.FUNC, unit)


def var_symbol(name: str, unit: str = UNIT) -> Symbol:
    return Symbol(name, SymbolKind.VAR, unit)


def method_symbol(type_name: str, name: str, interface: bool = False, unit: str = UNIT) -> Symbol:
    receiver = ReceiverShape(type_name, interface=interface)
    return Symbol(name, SymbolKind.FUNC, unit, receiver=receiver, package_level=False)


def uses(*symbols: Symbol) -> tuple[Use, ...]:
    """Wrap symbols in Use references."""
    return tuple(Use(symbol) for symbol in symbols)


def func(name: str, line: int = 1, body=(), signature=(), receiver=None, repeatable=False) -> FuncDecl:
    receiver_refs = ()
    if receiver is not None:
        receiver_refs = (Use(type_symbol(receiver.type_name)),)
    return FuncDecl(
        name=name,
        position=position(line),
        receiver=receiver,
        repeatable=repeatable,
        receiver_refs=receiver_refs,
        signature_refs=tuple(signature),
        body_refs=tuple(body),
    )


def type_decl(name: str, line: int = 1, refs=()) -> TypeDecl:
    return TypeDecl(name, position(line), tuple(refs))


def value_decl(*names: str, kind=SymbolKind.VAR, type_refs=(), values=(), line: int = 1) -> ValueDecl:
    return ValueDecl(
        kind=kind,
        names=tuple(ValueName(name, position(line, column)) for column, name in enumerate(names, 1)),
        type_refs=tuple(type_refs),
        values=tuple(tuple(value) for value in values),
    )


def make_unit(*declarations, test_declarations=(), snapshot: int = 0, scope_names=(), unit: str = UNIT) -> ResolvedUnit:
    """
    Build a ResolvedUnit from declarations.

    Args:
        declarations: Declarations of the main file
        test_declarations: Declarations of a test-only file
        snapshot: Snapshot generation of every file
        scope_names: Extra top-level names of the unit
        unit: Import path of the unit
    """
    files = [SourceFile("shapes.py", snapshot=snapshot, declarations=tuple(declarations))]
    if test_declarations:
        files.append(
            SourceFile("test_shapes.py", is_test=True, snapshot=snapshot, declarations=tuple(test_declarations))
        )
    return ResolvedUnit(import_path=unit, scope_names=frozenset(scope_names), files=tuple(files))

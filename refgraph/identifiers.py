"""
Identifier Canonicalization for refgraph

Every top-level declaration in an analysis unit gets exactly one string key.
Uses of a declaration must produce the same key as the declaration itself,
so both sides go through the functions in this module.

Key Formats:
    - Plain declarations:         "Name"
    - Methods:                    "Type.Name" or "*Type.Name" (by-reference receiver)
    - Anonymous declarations:     "_:file:line:col"
    - Anonymous methods:          "Type._:file:line:col"
    - Repeatable entry points:    "name:file:line:col"

Design Decisions:
    - Type-parameter lists are stripped: "Pair[T]" and "Pair[int]" are both "Pair"
    - Only the base name of the file is used, so keys survive moving the checkout
    - Positions are those of the declaration's name token, not the start of the statement
"""

import os
from typing import Optional

from refgraph.models import Position, ReceiverShape

ANONYMOUS_NAME = "_"


def canonical_type_name(type_name: str) -> str:
    """
    Return the canonical name of a type, without its type-parameter list.

    A type name is unique within its unit, so every instantiation of a
    generic type maps to the same key.

    Args:
        type_name: A type name, possibly with type parameters ("Vector[T]")

    Returns:
        The bare type name ("Vector")

    Example:
        >>> canonical_type_name("Pair[K, V]")
        'Pair'
    """
    bracket = type_name.find("[")
    if bracket == -1:
        return type_name.strip()
    return type_name[:bracket].strip()


def receiver_type_string(receiver: ReceiverShape) -> str:
    """Return "T" or "*T" for a receiver, with generics stripped."""
    prefix = "*" if receiver.by_reference else ""
    return prefix + canonical_type_name(receiver.type_name)


def _ambiguous_identifier(identifier: str, position: Position) -> str:
    file_name = os.path.basename(position.file)
    return f"{identifier}:{file_name}:{position.line}:{position.column}"


def anonymous_identifier(position: Position) -> str:
    """Identifier for an anonymous ("_") declaration."""
    return _ambiguous_identifier(ANONYMOUS_NAME, position)


def anonymous_method_identifier(receiver: ReceiverShape, position: Position) -> str:
    """Identifier for an anonymous method, e.g. "*T._:file.py:3:9"."""
    return _ambiguous_identifier(f"{receiver_type_string(receiver)}.{ANONYMOUS_NAME}", position)


def repeatable_identifier(name: str, position: Position) -> str:
    """Identifier for a declaration that may legally appear many times under one name."""
    return _ambiguous_identifier(name, position)


def func_identifier_use(receiver: Optional[ReceiverShape], name: str) -> str:
    """
    Return the key used when a function or method is referenced.

    Referenced functions are never anonymous or repeatable (those cannot
    be called by name), so no position is needed.

    Args:
        receiver: Receiver shape for methods, None for plain functions
        name: Function name

    Returns:
        "name", "T.name" or "*T.name"
    """
    if receiver is None:
        return name
    return f"{receiver_type_string(receiver)}.{name}"


def func_identifier(
    receiver: Optional[ReceiverShape],
    name: str,
    position: Position,
    repeatable: bool = False,
) -> str:
    """
    Return the key of a function or method declaration.

    Args:
        receiver: Receiver shape for methods, None for plain functions
        name: Declared name
        position: Position of the name token
        repeatable: True if this name may be declared many times

    Returns:
        The canonical identifier

    Example:
        >>> func_identifier(ReceiverShape("Pair[T]", by_reference=True), "Swap", Position("pair.py", 3, 1))
        '*Pair.Swap'
    """
    if receiver is None:
        if name == ANONYMOUS_NAME:
            return anonymous_identifier(position)
        if repeatable:
            return repeatable_identifier(name, position)
        return name

    if name == ANONYMOUS_NAME:
        return anonymous_method_identifier(receiver, position)
    if repeatable:
        return repeatable_identifier(func_identifier_use(receiver, name), position)
    return func_identifier_use(receiver, name)


def declaration_identifier(name: str, position: Position) -> str:
    """Key of a type or value declaration: its canonical name, or the anonymous form."""
    if name == ANONYMOUS_NAME:
        return anonymous_identifier(position)
    return canonical_type_name(name)


def is_anonymous_identifier(identifier: str) -> bool:
    """
    Report whether identifier is anonymous.

    Matches "_", "_:file:line:col" and "T._:file:line:col".
    """
    if identifier == ANONYMOUS_NAME or identifier.startswith(ANONYMOUS_NAME + ":"):
        return True
    return "._:" in identifier


def is_repeatable_identifier(identifier: str) -> bool:
    """Report whether identifier is position-qualified but not anonymous."""
    if is_anonymous_identifier(identifier):
        return False
    parts = identifier.rsplit(":", 3)
    return len(parts) == 4 and parts[2].isdigit() and parts[3].isdigit()


def is_ambiguous_identifier(identifier: str) -> bool:
    """Report whether identifier is anonymous or a repeatable entry point."""
    return is_anonymous_identifier(identifier) or is_repeatable_identifier(identifier)

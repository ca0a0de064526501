"""Type system for script expressions.

Four value kinds exist: BOOLEAN, INTEGER, NUMBER and STRING. INTEGER and
NUMBER are "numbery"; mixing them promotes to NUMBER. There are no other
implicit conversions (no string <-> number, no boolean <-> integer).

The checks below run once, while an expression tree is constructed, so a
script with a type error never produces a tree.
"""

from __future__ import annotations

from enum import Enum


class ScriptTypeError(TypeError):
    """Operand types violate the promotion/compatibility rules."""


class Type(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"


NUMBERY = frozenset({Type.INTEGER, Type.NUMBER})


def is_numbery(t: Type) -> bool:
    return t in NUMBERY


def common_numeric_type(left: Type, right: Type) -> Type:
    """Result type of an arithmetic operation on *left* and *right*.

    INTEGER if both sides are INTEGER, NUMBER if both are numbery,
    otherwise a ``ScriptTypeError``.
    """
    if left == Type.INTEGER and right == Type.INTEGER:
        return Type.INTEGER
    if is_numbery(left) and is_numbery(right):
        return Type.NUMBER
    raise ScriptTypeError(
        f"invalid type for arithmetic operation: {Type(left).value} and {Type(right).value}"
    )


def check_comparison_types(left: Type, right: Type) -> Type:
    if not (is_numbery(left) and is_numbery(right)):
        raise ScriptTypeError(
            f"invalid type for comparison: {Type(left).value} and {Type(right).value}"
        )
    return Type.BOOLEAN


def check_logical_types(left: Type, right: Type) -> Type:
    if left != Type.BOOLEAN or right != Type.BOOLEAN:
        raise ScriptTypeError(
            f"invalid type for logical operation: {Type(left).value} and {Type(right).value}"
        )
    return Type.BOOLEAN


def is_assignable(target: Type, source: Type) -> bool:
    """Whether a value of type *source* may be stored in a *target* cell.

    Identical types always are; INTEGER widens into NUMBER.
    """
    return target == source or (target == Type.NUMBER and source == Type.INTEGER)


def check_assignable(target: Type, source: Type) -> None:
    if not is_assignable(target, source):
        raise ScriptTypeError(
            f"cannot assign {Type(source).value} to {Type(target).value}"
        )

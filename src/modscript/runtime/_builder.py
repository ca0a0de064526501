"""Type-checked construction of expression trees against a context.

``ExpressionBuilder`` is the surface a parser drives: one method per node
kind, each of which either returns a fully typed node or raises. Variable
and property handles are resolved while building, so an unknown name is a
construction error, never a per-tick one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modscript.model.expressions import (
    BinaryExpr,
    BinaryOp,
    Expression,
    LiteralExpr,
    PropertyExpr,
    UnaryExpr,
    UnaryOp,
    VariableExpr,
)
from modscript.model.types import ScriptTypeError, Type

if TYPE_CHECKING:
    from ._context import ScriptContext


def check_bindings(expr: Expression, context: ScriptContext) -> None:
    """Verify every handle in *expr* resolves in *context* with its declared type.

    Needed for trees built outside an ``ExpressionBuilder``, e.g. loaded from
    JSON. Raises ``LookupError`` for unknown names and ``ScriptTypeError``
    when a handle's type disagrees with the live cell.
    """
    if expr.kind == "variable":
        actual = Type(context.variable(expr.name).kind)
        _check_handle(f"variable '{expr.name}'", expr.result_type, actual)
    elif expr.kind == "property":
        actual = context.module(expr.module).property_type(expr.property)
        _check_handle(f"property '{expr.module}.{expr.property}'", expr.result_type, actual)
    elif expr.kind == "unary":
        check_bindings(expr.operand, context)
    elif expr.kind == "binary":
        check_bindings(expr.left, context)
        check_bindings(expr.right, context)


def _check_handle(what: str, declared: Type, actual: Type) -> None:
    if declared != actual:
        raise ScriptTypeError(
            f"{what} is {actual.value}, expression declares {declared.value}"
        )


class ExpressionBuilder:
    """Builds expression nodes, resolving handles through *context*.

    Operand arguments may be nodes or plain Python constants, which are
    wrapped as literals.
    """

    def __init__(self, context: ScriptContext) -> None:
        self.context = context

    # -----------------------------------------------------------------------
    # Leaves
    # -----------------------------------------------------------------------

    def literal(self, value: bool | int | float | str) -> LiteralExpr:
        return LiteralExpr(value=value)

    def boolean(self, value: bool) -> LiteralExpr:
        return LiteralExpr(value=bool(value))

    def integer(self, value: int) -> LiteralExpr:
        return LiteralExpr(value=int(value))

    def number(self, value: float) -> LiteralExpr:
        return LiteralExpr(value=float(value))

    def string(self, value: str) -> LiteralExpr:
        return LiteralExpr(value=str(value))

    def variable(self, name: str) -> VariableExpr:
        cell = self.context.variable(name)
        return VariableExpr(name=name, result_type=Type(cell.kind))

    def property(self, module: str, name: str) -> PropertyExpr:
        kind = self.context.module(module).property_type(name)
        return PropertyExpr(module=module, property=name, result_type=kind)

    # -----------------------------------------------------------------------
    # Operators
    # -----------------------------------------------------------------------

    def unary(self, op: UnaryOp, operand) -> UnaryExpr:
        return UnaryExpr(op=op, operand=self._node(operand))

    def binary(self, op: BinaryOp, left, right) -> BinaryExpr:
        return BinaryExpr(op=op, left=self._node(left), right=self._node(right))

    def negate(self, operand) -> UnaryExpr:
        return self.unary(UnaryOp.NEGATE, operand)

    def not_(self, operand) -> UnaryExpr:
        return self.unary(UnaryOp.NOT, operand)

    def power(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.POWER, left, right)

    def multiply(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.MULTIPLY, left, right)

    def divide(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.DIVIDE, left, right)

    def add(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.ADD, left, right)

    def subtract(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.SUBTRACT, left, right)

    def greater(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.GREATER, left, right)

    def less(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.LESS, left, right)

    def greater_equal(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.GREATER_EQUAL, left, right)

    def less_equal(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.LESS_EQUAL, left, right)

    def equal(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.EQUAL, left, right)

    def unequal(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.UNEQUAL, left, right)

    def and_(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.AND, left, right)

    def or_(self, left, right) -> BinaryExpr:
        return self.binary(BinaryOp.OR, left, right)

    def _node(self, value) -> Expression:
        if isinstance(value, (LiteralExpr, VariableExpr, PropertyExpr, UnaryExpr, BinaryExpr)):
            return value
        return self.literal(value)

"""Expression evaluator.

The ``Evaluator`` walks a type-checked expression tree against a
``ScriptContext``. There is one entry point per value domain; each checks
the node's ``result_type`` before dispatching on the node kind, so an entry
point that does not fit the node fails loudly instead of returning a
default.

Evaluation is synchronous and side-effect free: variable and property
handles are read live from the context on every call, nothing is cached.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
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
from modscript.model.types import Type

from ._values import (
    InvalidOperationError,
    integer_divide,
    integer_power,
    number_divide,
    number_power,
    wrap_int64,
)

if TYPE_CHECKING:
    from ._context import ScriptContext


_INTEGER_OPS: dict[BinaryOp, Callable[[int, int], int]] = {
    BinaryOp.POWER: integer_power,
    BinaryOp.MULTIPLY: lambda a, b: wrap_int64(a * b),
    BinaryOp.DIVIDE: integer_divide,
    BinaryOp.ADD: lambda a, b: wrap_int64(a + b),
    BinaryOp.SUBTRACT: lambda a, b: wrap_int64(a - b),
}

_NUMBER_OPS: dict[BinaryOp, Callable[[float, float], float]] = {
    BinaryOp.POWER: number_power,
    BinaryOp.MULTIPLY: operator.mul,
    BinaryOp.DIVIDE: number_divide,
    BinaryOp.ADD: operator.add,
    BinaryOp.SUBTRACT: operator.sub,
}

_COMPARISONS: dict[BinaryOp, Callable[[float, float], bool]] = {
    BinaryOp.GREATER: operator.gt,
    BinaryOp.LESS: operator.lt,
    BinaryOp.GREATER_EQUAL: operator.ge,
    BinaryOp.LESS_EQUAL: operator.le,
    BinaryOp.EQUAL: operator.eq,
    BinaryOp.UNEQUAL: operator.ne,
}


class Evaluator:
    """Evaluates expression trees against a script context.

    Parameters
    ----------
    context : ScriptContext
        Supplies the variable scope and the modules that handles refer to.
    """

    def __init__(self, context: ScriptContext) -> None:
        self.context = context

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def evaluate(self, expr: Expression) -> object:
        """Evaluate *expr* in the domain of its own result type."""
        return self._BY_TYPE[expr.result_type](self, expr)

    def evaluate_as_boolean(self, expr: Expression) -> bool:
        self._require(expr, Type.BOOLEAN, "boolean")
        handler = self._BOOLEAN_DISPATCH.get(expr.kind)
        if handler is None:
            raise InvalidOperationError(f"cannot evaluate {expr.kind} as boolean")
        return handler(self, expr)

    def evaluate_as_integer(self, expr: Expression) -> int:
        self._require(expr, Type.INTEGER, "integer")
        handler = self._INTEGER_DISPATCH.get(expr.kind)
        if handler is None:
            raise InvalidOperationError(f"cannot evaluate {expr.kind} as integer")
        return handler(self, expr)

    def evaluate_as_number(self, expr: Expression) -> float:
        # INTEGER nodes widen to float
        if expr.result_type == Type.INTEGER:
            return float(self.evaluate_as_integer(expr))
        self._require(expr, Type.NUMBER, "number")
        handler = self._NUMBER_DISPATCH.get(expr.kind)
        if handler is None:
            raise InvalidOperationError(f"cannot evaluate {expr.kind} as number")
        return handler(self, expr)

    def evaluate_as_string(self, expr: Expression) -> str:
        self._require(expr, Type.STRING, "string")
        handler = self._STRING_DISPATCH.get(expr.kind)
        if handler is None:
            raise InvalidOperationError(f"cannot evaluate {expr.kind} as string")
        return handler(self, expr)

    @staticmethod
    def _require(expr: Expression, expected: Type, domain: str) -> None:
        if expr.result_type != expected:
            raise InvalidOperationError(
                f"cannot evaluate {expr.result_type.value} {expr.kind} expression as {domain}"
            )

    # -----------------------------------------------------------------------
    # Leaves
    # -----------------------------------------------------------------------

    def _eval_literal(self, expr: LiteralExpr) -> object:
        return expr.value

    def _eval_variable(self, expr: VariableExpr) -> object:
        cell = self.context.variable(expr.name)
        if cell.kind != expr.result_type:
            raise InvalidOperationError(
                f"variable '{expr.name}' holds {cell.kind}, "
                f"expression expects {expr.result_type.value}"
            )
        return cell.value

    def _eval_property(self, expr: PropertyExpr) -> object:
        module = self.context.module(expr.module)
        kind = module.property_type(expr.property)
        if kind != expr.result_type:
            raise InvalidOperationError(
                f"property '{expr.module}.{expr.property}' holds {kind.value}, "
                f"expression expects {expr.result_type.value}"
            )
        return module.get_property(expr.property)

    # -----------------------------------------------------------------------
    # Boolean domain
    # -----------------------------------------------------------------------

    def _eval_boolean_unary(self, expr: UnaryExpr) -> bool:
        if expr.op != UnaryOp.NOT:
            raise InvalidOperationError(f"{expr.op.value} is not a boolean operation")
        return not self.evaluate_as_boolean(expr.operand)

    def _eval_boolean_binary(self, expr: BinaryExpr) -> bool:
        compare = _COMPARISONS.get(expr.op)
        if compare is not None:
            return compare(
                self.evaluate_as_number(expr.left),
                self.evaluate_as_number(expr.right),
            )
        # No short-circuit: both operands are always evaluated
        left = self.evaluate_as_boolean(expr.left)
        right = self.evaluate_as_boolean(expr.right)
        if expr.op == BinaryOp.AND:
            return left and right
        if expr.op == BinaryOp.OR:
            return left or right
        raise InvalidOperationError(f"{expr.op.value} is not a boolean operation")

    # -----------------------------------------------------------------------
    # Integer domain
    # -----------------------------------------------------------------------

    def _eval_integer_unary(self, expr: UnaryExpr) -> int:
        if expr.op != UnaryOp.NEGATE:
            raise InvalidOperationError(f"{expr.op.value} is not an integer operation")
        return wrap_int64(-self.evaluate_as_integer(expr.operand))

    def _eval_integer_binary(self, expr: BinaryExpr) -> int:
        apply = _INTEGER_OPS.get(expr.op)
        if apply is None:
            raise InvalidOperationError(f"{expr.op.value} is not an integer operation")
        return apply(
            self.evaluate_as_integer(expr.left),
            self.evaluate_as_integer(expr.right),
        )

    # -----------------------------------------------------------------------
    # Number domain
    # -----------------------------------------------------------------------

    def _eval_number_leaf(self, expr: Expression) -> float:
        return float(self._LEAVES[expr.kind](self, expr))

    def _eval_number_unary(self, expr: UnaryExpr) -> float:
        if expr.op != UnaryOp.NEGATE:
            raise InvalidOperationError(f"{expr.op.value} is not a numeric operation")
        return -self.evaluate_as_number(expr.operand)

    def _eval_number_binary(self, expr: BinaryExpr) -> float:
        apply = _NUMBER_OPS.get(expr.op)
        if apply is None:
            raise InvalidOperationError(f"{expr.op.value} is not a numeric operation")
        return apply(
            self.evaluate_as_number(expr.left),
            self.evaluate_as_number(expr.right),
        )

    # -----------------------------------------------------------------------
    # Dispatch tables
    # -----------------------------------------------------------------------

    _LEAVES: dict[str, Callable[[Evaluator, Expression], object]] = {
        "literal": _eval_literal,
        "variable": _eval_variable,
        "property": _eval_property,
    }

    _BOOLEAN_DISPATCH: dict[str, Callable[[Evaluator, Expression], bool]] = {
        **_LEAVES,
        "unary": _eval_boolean_unary,
        "binary": _eval_boolean_binary,
    }

    _INTEGER_DISPATCH: dict[str, Callable[[Evaluator, Expression], int]] = {
        **_LEAVES,
        "unary": _eval_integer_unary,
        "binary": _eval_integer_binary,
    }

    _NUMBER_DISPATCH: dict[str, Callable[[Evaluator, Expression], float]] = {
        "literal": _eval_number_leaf,
        "variable": _eval_number_leaf,
        "property": _eval_number_leaf,
        "unary": _eval_number_unary,
        "binary": _eval_number_binary,
    }

    _STRING_DISPATCH: dict[str, Callable[[Evaluator, Expression], str]] = dict(_LEAVES)

    _BY_TYPE: dict[Type, Callable[[Evaluator, Expression], object]] = {
        Type.BOOLEAN: evaluate_as_boolean,
        Type.INTEGER: evaluate_as_integer,
        Type.NUMBER: evaluate_as_number,
        Type.STRING: evaluate_as_string,
    }

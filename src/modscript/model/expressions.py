"""Expression nodes for scripts.

Every node carries a ``result_type`` decided once, when the node is
constructed, from the types of its operands. Construction fails with a
``ScriptTypeError`` if the operands violate the typing rules, so an
ill-typed tree can never exist.

Variables and module properties are referenced by name handles; the names
are resolved through an explicit context at evaluation time.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictStr,
    ValidationInfo,
    field_validator,
)

from .types import (
    ScriptTypeError,
    Type,
    check_comparison_types,
    check_logical_types,
    common_numeric_type,
)
from .variables import Int64


class UnaryOp(str, Enum):
    NEGATE = "NEGATE"
    NOT = "NOT"


class BinaryOp(str, Enum):
    POWER = "POWER"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    GREATER = "GREATER"
    LESS = "LESS"
    GREATER_EQUAL = "GREATER_EQUAL"
    LESS_EQUAL = "LESS_EQUAL"
    EQUAL = "EQUAL"
    UNEQUAL = "UNEQUAL"
    AND = "AND"
    OR = "OR"


ARITHMETIC_OPS = frozenset({
    BinaryOp.POWER, BinaryOp.MULTIPLY, BinaryOp.DIVIDE,
    BinaryOp.ADD, BinaryOp.SUBTRACT,
})

COMPARISON_OPS = frozenset({
    BinaryOp.GREATER, BinaryOp.LESS,
    BinaryOp.GREATER_EQUAL, BinaryOp.LESS_EQUAL,
    BinaryOp.EQUAL, BinaryOp.UNEQUAL,
})

LOGICAL_OPS = frozenset({BinaryOp.AND, BinaryOp.OR})


def _settle(declared: Type | None, inferred: Type, what: str) -> Type:
    """Reconcile a declared result type (e.g. from JSON) with the inferred one."""
    if declared is not None and declared != inferred:
        raise ScriptTypeError(
            f"{what} declared as {declared.value} but operands give {inferred.value}"
        )
    return inferred


def literal_type(value: object) -> Type:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return Type.BOOLEAN
    if isinstance(value, int):
        return Type.INTEGER
    if isinstance(value, float):
        return Type.NUMBER
    if isinstance(value, str):
        return Type.STRING
    raise ScriptTypeError(f"unsupported literal: {value!r}")


def unary_result_type(op: UnaryOp, operand: Type) -> Type:
    if op == UnaryOp.NEGATE:
        return common_numeric_type(operand, operand)
    return check_logical_types(operand, operand)


def binary_result_type(op: BinaryOp, left: Type, right: Type) -> Type:
    if op in ARITHMETIC_OPS:
        return common_numeric_type(left, right)
    if op in COMPARISON_OPS:
        return check_comparison_types(left, right)
    return check_logical_types(left, right)


class _Node(BaseModel):
    """Base of all expression nodes. Nodes are immutable once built."""

    model_config = ConfigDict(frozen=True)


class LiteralExpr(_Node):
    """A constant: boolean, integer, number or string."""

    kind: Literal["literal"] = "literal"
    value: StrictBool | Int64 | StrictFloat | StrictStr
    result_type: Type | None = Field(default=None, validate_default=True)

    @field_validator("result_type")
    @classmethod
    def _infer_type(cls, declared: Type | None, info: ValidationInfo) -> Type | None:
        if "value" not in info.data:
            return declared
        return _settle(declared, literal_type(info.data["value"]), "literal")


class VariableExpr(_Node):
    """Reference to a variable cell in the context scope, read at every evaluation."""

    kind: Literal["variable"] = "variable"
    name: str
    result_type: Type


class PropertyExpr(_Node):
    """Live reference to a module property.

    *result_type* is the kind of the bound property cell.
    """

    kind: Literal["property"] = "property"
    module: str
    property: str
    result_type: Type


class UnaryExpr(_Node):
    kind: Literal["unary"] = "unary"
    op: UnaryOp
    operand: Expression
    result_type: Type | None = Field(default=None, validate_default=True)

    @field_validator("result_type")
    @classmethod
    def _infer_type(cls, declared: Type | None, info: ValidationInfo) -> Type | None:
        # op and operand validate first; if either failed there is nothing to infer
        if "op" not in info.data or "operand" not in info.data:
            return declared
        op = info.data["op"]
        inferred = unary_result_type(op, info.data["operand"].result_type)
        return _settle(declared, inferred, op.value)


class BinaryExpr(_Node):
    kind: Literal["binary"] = "binary"
    op: BinaryOp
    left: Expression
    right: Expression
    result_type: Type | None = Field(default=None, validate_default=True)

    @field_validator("result_type")
    @classmethod
    def _infer_type(cls, declared: Type | None, info: ValidationInfo) -> Type | None:
        if not {"op", "left", "right"} <= info.data.keys():
            return declared
        op = info.data["op"]
        inferred = binary_result_type(
            op, info.data["left"].result_type, info.data["right"].result_type,
        )
        return _settle(declared, inferred, op.value)


Expression = Annotated[
    Union[
        LiteralExpr,
        VariableExpr,
        PropertyExpr,
        UnaryExpr,
        BinaryExpr,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression references.
UnaryExpr.model_rebuild()
BinaryExpr.model_rebuild()

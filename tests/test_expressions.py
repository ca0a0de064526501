"""Tests for expression node construction and typing."""

import itertools

import pytest
from pydantic import TypeAdapter, ValidationError

from conftest import binop, lit, unop

from modscript.model.expressions import (
    ARITHMETIC_OPS,
    COMPARISON_OPS,
    LOGICAL_OPS,
    BinaryExpr,
    BinaryOp,
    Expression,
    LiteralExpr,
    PropertyExpr,
    UnaryOp,
    VariableExpr,
)
from modscript.model.types import ScriptTypeError, Type

SAMPLES = {
    Type.BOOLEAN: True,
    Type.INTEGER: 2,
    Type.NUMBER: 2.5,
    Type.STRING: "two",
}

ALL_PAIRS = list(itertools.product(Type, repeat=2))


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

class TestLiteral:
    @pytest.mark.parametrize("kind,value", list(SAMPLES.items()))
    def test_inferred_type(self, kind, value):
        assert lit(value).result_type == kind

    def test_bool_is_not_integer(self):
        assert lit(False).result_type == Type.BOOLEAN

    def test_declared_type_matches(self):
        assert LiteralExpr(value=7, result_type=Type.INTEGER).result_type == Type.INTEGER

    def test_declared_type_conflict(self):
        with pytest.raises(ScriptTypeError, match="literal declared as number"):
            LiteralExpr(value=7, result_type=Type.NUMBER)


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------

class TestArithmeticNodes:
    def test_integer_add(self):
        assert binop(BinaryOp.ADD, 2, 3).result_type == Type.INTEGER

    def test_mixed_add(self):
        assert binop(BinaryOp.ADD, 2, 3.5).result_type == Type.NUMBER

    @pytest.mark.parametrize("op", sorted(ARITHMETIC_OPS))
    @pytest.mark.parametrize("left,right", ALL_PAIRS)
    def test_rejects_non_numeric(self, op, left, right):
        if left in (Type.INTEGER, Type.NUMBER) and right in (Type.INTEGER, Type.NUMBER):
            binop(op, SAMPLES[left], SAMPLES[right])
        else:
            with pytest.raises(ScriptTypeError):
                binop(op, SAMPLES[left], SAMPLES[right])

    def test_negate_keeps_type(self):
        assert unop(UnaryOp.NEGATE, 3).result_type == Type.INTEGER
        assert unop(UnaryOp.NEGATE, 3.0).result_type == Type.NUMBER

    def test_negate_rejects_boolean(self):
        with pytest.raises(ScriptTypeError, match="arithmetic"):
            unop(UnaryOp.NEGATE, True)


class TestComparisonNodes:
    @pytest.mark.parametrize("op", sorted(COMPARISON_OPS))
    @pytest.mark.parametrize("left,right", ALL_PAIRS)
    def test_all_pairs(self, op, left, right):
        if left in (Type.INTEGER, Type.NUMBER) and right in (Type.INTEGER, Type.NUMBER):
            assert binop(op, SAMPLES[left], SAMPLES[right]).result_type == Type.BOOLEAN
        else:
            with pytest.raises(ScriptTypeError, match="comparison"):
                binop(op, SAMPLES[left], SAMPLES[right])


class TestLogicalNodes:
    @pytest.mark.parametrize("op", sorted(LOGICAL_OPS))
    @pytest.mark.parametrize("left,right", ALL_PAIRS)
    def test_all_pairs(self, op, left, right):
        if left == Type.BOOLEAN and right == Type.BOOLEAN:
            assert binop(op, SAMPLES[left], SAMPLES[right]).result_type == Type.BOOLEAN
        else:
            with pytest.raises(ScriptTypeError, match="logical"):
                binop(op, SAMPLES[left], SAMPLES[right])

    @pytest.mark.parametrize("kind", [Type.INTEGER, Type.NUMBER, Type.STRING])
    def test_not_rejects(self, kind):
        with pytest.raises(ScriptTypeError, match="logical"):
            unop(UnaryOp.NOT, SAMPLES[kind])

    def test_not_boolean(self):
        assert unop(UnaryOp.NOT, True).result_type == Type.BOOLEAN


class TestNestedConstruction:
    def test_error_surfaces_from_deep_subtree(self):
        inner = binop(BinaryOp.GREATER, 4, 1)
        with pytest.raises(ScriptTypeError):
            binop(BinaryOp.MULTIPLY, binop(BinaryOp.ADD, 2, 3), inner)

    def test_handles_carry_declared_type(self):
        expr = binop(
            BinaryOp.ADD,
            VariableExpr(name="x", result_type=Type.INTEGER),
            PropertyExpr(module="pwm", property="duty", result_type=Type.NUMBER),
        )
        assert expr.result_type == Type.NUMBER


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------

class TestImmutability:
    def test_child_cannot_be_replaced(self):
        expr = binop(BinaryOp.ADD, 2, 3)
        with pytest.raises(ValidationError, match="frozen"):
            expr.left = lit("two")
        assert expr.left == lit(2)

    def test_result_type_cannot_be_overwritten(self):
        expr = binop(BinaryOp.ADD, 2, 3)
        with pytest.raises(ValidationError, match="frozen"):
            expr.result_type = Type.STRING
        assert expr.result_type == Type.INTEGER

    @pytest.mark.parametrize("node", [
        lit(1),
        VariableExpr(name="x", result_type=Type.INTEGER),
        PropertyExpr(module="pwm", property="duty", result_type=Type.INTEGER),
        unop(UnaryOp.NOT, True),
    ])
    def test_every_node_kind_frozen(self, node):
        with pytest.raises(ValidationError):
            node.kind = "literal"

    def test_equal_trees_hash_equal(self):
        assert hash(binop(BinaryOp.ADD, 2, 3)) == hash(binop(BinaryOp.ADD, 2, 3))


# ---------------------------------------------------------------------------
# Loading serialized trees
# ---------------------------------------------------------------------------

class TestSerializedTrees:
    def test_json_round_trip(self):
        tree = binop(
            BinaryOp.AND,
            binop(BinaryOp.GREATER, binop(BinaryOp.ADD, 2, 3.5), 4),
            unop(UnaryOp.NOT, False),
        )
        loaded = TypeAdapter(Expression).validate_json(tree.model_dump_json())
        assert loaded == tree
        assert loaded.left.left.result_type == Type.NUMBER

    def test_result_type_inferred_when_missing(self):
        loaded = TypeAdapter(Expression).validate_python({
            "kind": "binary",
            "op": "DIVIDE",
            "left": {"kind": "literal", "value": 7},
            "right": {"kind": "literal", "value": 2},
        })
        assert isinstance(loaded, BinaryExpr)
        assert loaded.result_type == Type.INTEGER

    def test_ill_typed_tree_rejected(self):
        with pytest.raises(ScriptTypeError):
            TypeAdapter(Expression).validate_python({
                "kind": "binary",
                "op": "ADD",
                "left": {"kind": "literal", "value": True},
                "right": {"kind": "literal", "value": 1},
            })

    def test_tampered_result_type_rejected(self):
        with pytest.raises(ScriptTypeError, match="declared as integer"):
            TypeAdapter(Expression).validate_python({
                "kind": "binary",
                "op": "ADD",
                "left": {"kind": "literal", "value": 1.5},
                "right": {"kind": "literal", "value": 1},
                "result_type": "integer",
            })

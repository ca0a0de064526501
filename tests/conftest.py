"""Shared test helpers for the modscript test suite."""

from modscript.model.expressions import BinaryExpr, BinaryOp, LiteralExpr, UnaryExpr, UnaryOp
from modscript.model.variables import IntegerVariable, NumberVariable
from modscript.modules import Module
from modscript.runtime import Evaluator, ExpressionBuilder, ScriptContext


def lit(value):
    """Shorthand for LiteralExpr(value=value)."""
    return LiteralExpr(value=value)


def _node(value):
    if isinstance(value, (bool, int, float, str)):
        return lit(value)
    return value


def binop(op: BinaryOp, left, right):
    """Build a BinaryExpr, wrapping plain constants as literals."""
    return BinaryExpr(op=op, left=_node(left), right=_node(right))


def unop(op: UnaryOp, operand):
    return UnaryExpr(op=op, operand=_node(operand))


def make_context(*modules, **kwargs):
    """ScriptContext with *modules* registered, plus its builder and evaluator."""
    ctx = ScriptContext(**kwargs)
    for module in modules:
        ctx.add_module(module)
    return ctx, ExpressionBuilder(ctx), ctx.evaluator


def evaluate(expr, ctx=None):
    """Evaluate *expr* in its own domain against *ctx* (or an empty context)."""
    return Evaluator(ctx or ScriptContext()).evaluate(expr)


class Sensor(Module):
    """Module with one integer and one number property, counting reads."""

    def __init__(self, name="sensor"):
        super().__init__(name, properties={
            "count": IntegerVariable(value=0),
            "level": NumberVariable(value=1.5),
        })
        self.reads = 0
        self.steps = 0

    def get_property(self, name):
        self.reads += 1
        return super().get_property(name)

    def step(self):
        self.steps += 1
        super().step()


class Recorder(Module):
    """Bus subscriber that records every message it is handed."""

    def __init__(self, name="recorder"):
        super().__init__(name)
        self.messages = []

    def handle_can_msg(self, identifier, data):
        self.messages.append((identifier, data))


class Failing(Module):
    """Module whose step always fails."""

    def step(self):
        raise RuntimeError(f"{self.name} is broken")

"""modscript runtime — building and evaluating script expressions.

Entry point::

    from modscript.runtime import ScriptContext, ExpressionBuilder

    ctx = ScriptContext()
    ctx.add_module(PwmOutput("led", driver, pin=2, timer=0, channel=0))
    b = ExpressionBuilder(ctx)
    ctx.bind("led", "duty", b.multiply(b.property("led", "duty"), 2))
    ctx.tick()
"""

from ._builder import ExpressionBuilder, check_bindings
from ._context import ScriptContext, TickError, UnknownNameError
from ._evaluator import Evaluator
from ._values import InvalidOperationError

__all__ = [
    "Evaluator",
    "ExpressionBuilder",
    "InvalidOperationError",
    "ScriptContext",
    "TickError",
    "UnknownNameError",
    "check_bindings",
]

"""Script context: the explicit scope expressions are built and evaluated in.

Holds the global variable scope, the registered modules and the property
bindings, and runs the control tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from modscript.model.expressions import Expression
from modscript.model.statements import Assignment, MethodCall, PropertyTarget, Statement
from modscript.model.types import Type, check_assignable
from modscript.model.variables import BaseVariable, make_variable

from ._builder import check_bindings
from ._evaluator import Evaluator

if TYPE_CHECKING:
    from modscript.modules import Module

log = logging.getLogger(__name__)


class UnknownNameError(LookupError):
    """A variable or module name is unknown, or declared twice."""


@dataclass
class TickError:
    """A failure raised by one module during a tick."""

    module: str
    error: Exception


class ScriptContext:
    """Variable scope, module set and tick loop for one script.

    Parameters
    ----------
    tick_period_ms : int
        Time advanced by every tick (default 10ms).
    """

    def __init__(self, *, tick_period_ms: int = 10) -> None:
        self.tick_period_ms = tick_period_ms
        self.clock_ms = 0
        self._variables: dict[str, BaseVariable] = {}
        self._modules: dict[str, Module] = {}
        self._bindings: dict[str, list[Assignment]] = {}
        self.evaluator = Evaluator(self)

    # -----------------------------------------------------------------------
    # Scope
    # -----------------------------------------------------------------------

    def declare(self, name: str, kind: Type, value: object = None) -> BaseVariable:
        """Declare a global variable and return its cell."""
        if name in self._variables:
            raise UnknownNameError(f"variable '{name}' is already declared")
        cell = make_variable(kind, value)
        self._variables[name] = cell
        return cell

    def variable(self, name: str) -> BaseVariable:
        try:
            return self._variables[name]
        except KeyError:
            raise UnknownNameError(f"unknown variable '{name}'") from None

    @property
    def variables(self) -> dict[str, BaseVariable]:
        return dict(self._variables)

    def add_module(self, module: Module) -> Module:
        """Register *module*. Modules step in registration order."""
        if module.name in self._modules:
            raise UnknownNameError(f"module '{module.name}' is already registered")
        self._modules[module.name] = module
        self._bindings[module.name] = []
        log.debug("registered %s module '%s'", module.module_type.value, module.name)
        return module

    def module(self, name: str) -> Module:
        try:
            return self._modules[name]
        except KeyError:
            raise UnknownNameError(f"unknown module '{name}'") from None

    @property
    def modules(self) -> list[Module]:
        return list(self._modules.values())

    # -----------------------------------------------------------------------
    # Bindings and statements
    # -----------------------------------------------------------------------

    def bind(self, module: str, property: str, expression: Expression) -> Assignment:
        """Bind *expression* to a module property, re-evaluated every tick.

        The binding is fully checked here; a rejected binding never runs.
        """
        assignment = Assignment(
            target=PropertyTarget(module=module, property=property),
            value=expression,
        )
        self._check_assignment(assignment)
        self._bindings[module].append(assignment)
        return assignment

    def bindings(self, module: str) -> list[Assignment]:
        self.module(module)
        return list(self._bindings[module])

    def execute(self, statement: Statement) -> None:
        """Run an out-of-band statement immediately."""
        if isinstance(statement, Assignment):
            self._check_assignment(statement)
            self._assign(statement)
        elif isinstance(statement, MethodCall):
            for argument in statement.arguments:
                check_bindings(argument, self)
            self.module(statement.module).call(
                statement.method, statement.arguments, self.evaluator,
            )
        else:
            raise TypeError(f"unsupported statement: {type(statement).__name__}")

    def _check_assignment(self, assignment: Assignment) -> None:
        check_bindings(assignment.value, self)
        target = assignment.target
        if isinstance(target, PropertyTarget):
            kind = self.module(target.module).property_type(target.property)
        else:
            kind = Type(self.variable(target.name).kind)
        check_assignable(kind, assignment.value.result_type)

    def _assign(self, assignment: Assignment) -> None:
        value = self.evaluator.evaluate(assignment.value)
        target = assignment.target
        if isinstance(target, PropertyTarget):
            self.module(target.module).set_property(target.property, value)
        else:
            cell = self.variable(target.name)
            cell.value = value

    # -----------------------------------------------------------------------
    # Tick
    # -----------------------------------------------------------------------

    def tick(self, n: int = 1) -> list[TickError]:
        """Run *n* control ticks.

        Each tick visits every module in registration order: its bindings
        are evaluated and written, then its ``step()`` runs. A failure is
        logged and collected, and the remaining modules still run.
        """
        errors: list[TickError] = []
        for _ in range(n):
            for name, module in self._modules.items():
                try:
                    for assignment in self._bindings[name]:
                        self._assign(assignment)
                    module.step()
                except Exception as error:
                    log.exception("module '%s' failed at %d ms", name, self.clock_ms)
                    errors.append(TickError(module=name, error=error))
            self.clock_ms += self.tick_period_ms
        return errors

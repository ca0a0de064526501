"""Module contract.

A module is a named hardware abstraction. It owns a fixed registry of typed
properties, is stepped once per control tick and can be invoked out of band
through ``call()``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from modscript.model.expressions import Expression
from modscript.model.types import Type, is_assignable
from modscript.model.variables import BaseVariable

if TYPE_CHECKING:
    from modscript.runtime import Evaluator

log = logging.getLogger(__name__)


class ModuleError(Exception):
    """Base class for errors raised by modules."""


class UnknownPropertyError(ModuleError, LookupError):
    """A property name is not in the module's registry."""


class DuplicateSubscriberError(ModuleError, LookupError):
    """A bus identifier already has a subscriber."""


class ArgumentError(ModuleError, TypeError):
    """Wrong number or types of arguments for a module method."""


class UnknownMethodError(ModuleError, AttributeError):
    """No module in the delegation chain knows the method."""


class TransmitError(ModuleError):
    """The hardware refused to send."""


class ModuleType(str, Enum):
    PWM_OUTPUT = "pwm_output"
    CAN = "can"
    CUSTOM = "custom"


class Module:
    """Base class for all modules.

    Parameters
    ----------
    name : str
        Unique module name.
    module_type : ModuleType
        Discriminant of the concrete module kind.
    properties : Mapping[str, BaseVariable]
        Property cells with their defaults. The set of names is fixed here.
    """

    def __init__(
        self,
        name: str,
        module_type: ModuleType = ModuleType.CUSTOM,
        properties: Mapping[str, BaseVariable] | None = None,
    ) -> None:
        self.name = name
        self.module_type = module_type
        self.properties: Mapping[str, BaseVariable] = MappingProxyType(dict(properties or {}))
        self.output = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    # -----------------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------------

    def _cell(self, name: str) -> BaseVariable:
        try:
            return self.properties[name]
        except KeyError:
            raise UnknownPropertyError(
                f"module '{self.name}' has no property '{name}'. "
                f"Available: {sorted(self.properties)}"
            ) from None

    def get_property(self, name: str) -> object:
        """Current value of property *name*."""
        return self._cell(name).value

    def property_type(self, name: str) -> Type:
        return Type(self._cell(name).kind)

    def set_property(self, name: str, value: object) -> None:
        cell = self._cell(name)
        cell.value = value

    # -----------------------------------------------------------------------
    # Hooks
    # -----------------------------------------------------------------------

    def step(self) -> None:
        """Per-tick hook. Subclasses push their properties to hardware first."""
        if self.output and self.properties:
            log.info(
                "%s %s",
                self.name,
                " ".join(f"{key}={cell.value}" for key, cell in self.properties.items()),
            )

    def call(self, method_name: str, arguments: Sequence[Expression], evaluator: Evaluator) -> None:
        """Invoke *method_name*. Subclasses handle their own methods and
        delegate everything else here."""
        if method_name == "mute":
            self.expect(arguments, 0)
            self.output = False
        elif method_name == "unmute":
            self.expect(arguments, 0)
            self.output = True
        else:
            raise UnknownMethodError(f"module '{self.name}' has no method '{method_name}'")

    def handle_can_msg(self, identifier: int, data: bytes) -> None:
        raise NotImplementedError(f"module '{self.name}' does not handle bus messages")

    @staticmethod
    def expect(arguments: Sequence[Expression], count: int, *types: Type) -> None:
        """Check argument count and, if *types* are given, per-position types.

        INTEGER arguments are accepted where NUMBER is expected.
        """
        if len(arguments) != count:
            raise ArgumentError(f"expected {count} arguments, got {len(arguments)}")
        for index, (argument, expected) in enumerate(zip(arguments, types)):
            actual = argument.result_type
            if not is_assignable(expected, actual):
                raise ArgumentError(
                    f"argument {index} must be {expected.value}, got {actual.value}"
                )

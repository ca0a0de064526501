"""modscript modules — hardware abstractions driven by scripts.

Public API::

    from modscript.modules import Can, PwmOutput
"""

from ._module import (
    ArgumentError,
    DuplicateSubscriberError,
    Module,
    ModuleError,
    ModuleType,
    TransmitError,
    UnknownMethodError,
    UnknownPropertyError,
)
from ._protocols import CanDriver, PwmDriver
from .can import Can, CanConfig, CanMessage
from .pwm_output import PwmConfig, PwmOutput

__all__ = [
    "ArgumentError",
    "Can",
    "CanConfig",
    "CanDriver",
    "CanMessage",
    "DuplicateSubscriberError",
    "Module",
    "ModuleError",
    "ModuleType",
    "PwmConfig",
    "PwmDriver",
    "PwmOutput",
    "TransmitError",
    "UnknownMethodError",
    "UnknownPropertyError",
]

"""PWM output module."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from modscript.model.expressions import Expression
from modscript.model.variables import IntegerVariable

from ._module import Module, ModuleType
from ._protocols import PwmDriver

if TYPE_CHECKING:
    from modscript.runtime import Evaluator

log = logging.getLogger(__name__)

DUTY_RESOLUTION_BITS = 8
MAX_DUTY = 2**DUTY_RESOLUTION_BITS - 1
MIN_FREQUENCY = 1
APB_CLOCK_HZ = 80_000_000
# timer clock divided by the counter period
MAX_FREQUENCY = APB_CLOCK_HZ >> DUTY_RESOLUTION_BITS


class PwmConfig(BaseModel):
    """Pin and timer assignment of a PWM channel."""

    pin: int = Field(ge=0)
    timer: int = Field(ge=0)
    channel: int = Field(ge=0)
    frequency: int = Field(default=1000, ge=MIN_FREQUENCY, le=MAX_FREQUENCY)
    duty: int = Field(default=128, ge=0, le=MAX_DUTY)


class PwmOutput(Module):
    """A PWM channel with ``frequency`` and ``duty`` properties.

    The timer starts paused; the ``on`` and ``off`` methods resume and pause
    it. Each step pushes the current property values to the driver.
    """

    def __init__(self, name: str, driver: PwmDriver, *, pin: int, timer: int, channel: int) -> None:
        config = PwmConfig(pin=pin, timer=timer, channel=channel)
        super().__init__(
            name,
            ModuleType.PWM_OUTPUT,
            {
                "frequency": IntegerVariable(value=config.frequency),
                "duty": IntegerVariable(value=config.duty),
            },
        )
        self.config = config
        self.driver = driver
        driver.configure(config.pin, config.timer, config.channel, config.frequency, config.duty)
        driver.pause()

    def step(self) -> None:
        """Push ``frequency`` and ``duty`` to the driver, clamped to what the
        channel supports."""
        self.driver.set_frequency(self._clamped("frequency", MIN_FREQUENCY, MAX_FREQUENCY))
        self.driver.set_duty(self._clamped("duty", 0, MAX_DUTY))
        super().step()

    def _clamped(self, name: str, low: int, high: int) -> int:
        value = self.get_property(name)
        clamped = min(max(value, low), high)
        if clamped != value:
            log.warning(
                "%s %s=%d out of range %d..%d, using %d", self.name, name, value, low, high, clamped,
            )
        return clamped

    def call(self, method_name: str, arguments: Sequence[Expression], evaluator: Evaluator) -> None:
        if method_name == "on":
            self.expect(arguments, 0)
            self.driver.resume()
            log.debug("%s on", self.name)
        elif method_name == "off":
            self.expect(arguments, 0)
            self.driver.pause()
            log.debug("%s off", self.name)
        else:
            super().call(method_name, arguments, evaluator)

"""CAN bus module.

Routes every inbound message to at most one subscribing module, keyed by its
arbitration identifier, and sends messages on behalf of scripts.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

from modscript.model.expressions import Expression
from modscript.model.types import Type

from ._module import ArgumentError, DuplicateSubscriberError, Module, ModuleType, TransmitError
from ._protocols import CanDriver

if TYPE_CHECKING:
    from modscript.runtime import Evaluator

log = logging.getLogger(__name__)

BAUD_RATES = frozenset({1_000_000, 800_000, 500_000, 250_000, 125_000, 100_000, 50_000, 25_000})

MAX_IDENTIFIER = 0x1FFFFFFF


class CanConfig(BaseModel):
    baud_rate: int
    rx_queue_len: int = Field(default=20, gt=0)
    tx_queue_len: int = Field(default=20, gt=0)

    @field_validator("baud_rate")
    @classmethod
    def _supported_baud_rate(cls, value: int) -> int:
        if value not in BAUD_RATES:
            raise ValueError(f"invalid baud rate {value}; supported: {sorted(BAUD_RATES)}")
        return value


class CanMessage(BaseModel):
    identifier: int = Field(ge=0, le=MAX_IDENTIFIER)
    data: bytes = Field(default=b"", max_length=8)
    rtr: bool = False

    def __str__(self) -> str:
        text = f"can {self.identifier:03x}"
        if not self.rtr:
            text += "".join(f",{byte:02x}" for byte in self.data)
        return text


class Can(Module):
    """A CAN transceiver.

    Parameters
    ----------
    name : str
        Module name.
    driver : CanDriver
        Transceiver driver; started here with the validated configuration.
    baud_rate : int
        One of ``BAUD_RATES``.
    """

    def __init__(self, name: str, driver: CanDriver, baud_rate: int) -> None:
        super().__init__(name, ModuleType.CAN)
        self.config = CanConfig(baud_rate=baud_rate)
        self.driver = driver
        self.subscribers: dict[int, Module] = {}
        driver.start(self.config.baud_rate, self.config.rx_queue_len, self.config.tx_queue_len)

    def subscribe(self, identifier: int, module: Module) -> None:
        """Route messages with *identifier* to *module*. One subscriber per identifier."""
        if type(module).handle_can_msg is Module.handle_can_msg:
            raise ArgumentError(f"module '{module.name}' does not handle CAN messages")
        if identifier in self.subscribers:
            raise DuplicateSubscriberError(
                f"there is already a subscriber for CAN ID {identifier:03x}: "
                f"'{self.subscribers[identifier].name}'"
            )
        self.subscribers[identifier] = module

    def step(self) -> None:
        """Drain the receive queue and forward each message to its subscriber.

        A failing subscriber does not stop the drain; the first failure is
        raised once every pending message has been dispatched.
        """
        first_error: Exception | None = None
        while (message := self.driver.receive()) is not None:
            subscriber = self.subscribers.get(message.identifier)
            if subscriber is not None:
                try:
                    subscriber.handle_can_msg(message.identifier, message.data)
                except Exception as exc:
                    log.warning("subscriber '%s' failed on %s: %s", subscriber.name, message, exc)
                    if first_error is None:
                        first_error = exc
            if self.output:
                log.info("%s", message)
        super().step()
        if first_error is not None:
            raise first_error

    def send(self, identifier: int, data: bytes, rtr: bool = False) -> None:
        message = CanMessage(identifier=identifier, data=data, rtr=rtr)
        if not self.driver.transmit(message):
            raise TransmitError(f"could not send CAN message {identifier:03x}")

    def call(self, method_name: str, arguments: Sequence[Expression], evaluator: Evaluator) -> None:
        if method_name == "send":
            self.expect(arguments, 9, *[Type.INTEGER] * 9)
            identifier, *payload = [evaluator.evaluate_as_integer(a) for a in arguments]
            if not 0 <= identifier <= MAX_IDENTIFIER:
                raise ArgumentError(f"CAN ID {identifier} out of range")
            if any(not 0 <= byte <= 0xFF for byte in payload):
                raise ArgumentError(f"CAN data bytes must be within 0..255, got {payload}")
            self.send(identifier, bytes(payload))
        else:
            super().call(method_name, arguments, evaluator)

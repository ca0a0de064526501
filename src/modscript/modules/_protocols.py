"""Hardware driver protocols.

Modules talk to hardware only through these ``@runtime_checkable``
protocols; concrete drivers live outside the engine (see
``modscript.simulate`` for in-memory ones).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .can import CanMessage


@runtime_checkable
class PwmDriver(Protocol):
    """One PWM channel on one timer."""

    def configure(self, pin: int, timer: int, channel: int, frequency: int, duty: int) -> None: ...

    def set_frequency(self, frequency: int) -> None: ...

    def set_duty(self, duty: int) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...


@runtime_checkable
class CanDriver(Protocol):
    """A bus transceiver with bounded receive and transmit queues."""

    def start(self, baud_rate: int, rx_queue_len: int, tx_queue_len: int) -> None: ...

    def receive(self) -> CanMessage | None:
        """Return the next pending message without blocking, or None."""
        ...

    def transmit(self, message: CanMessage) -> bool:
        """Queue *message* without blocking. False if the queue is full."""
        ...

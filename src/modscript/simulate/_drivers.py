"""In-memory drivers for running modules without hardware."""

from __future__ import annotations

from collections import deque

from modscript.modules.can import CanMessage


class SimulatedPwmDriver:
    """Records the state a PWM peripheral would be in."""

    def __init__(self) -> None:
        self.configured = False
        self.pin: int | None = None
        self.timer: int | None = None
        self.channel: int | None = None
        self.frequency = 0
        self.duty = 0
        self.running = False

    def configure(self, pin: int, timer: int, channel: int, frequency: int, duty: int) -> None:
        self.configured = True
        self.pin, self.timer, self.channel = pin, timer, channel
        self.frequency = frequency
        self.duty = duty

    def set_frequency(self, frequency: int) -> None:
        self.frequency = frequency

    def set_duty(self, duty: int) -> None:
        self.duty = duty

    def pause(self) -> None:
        self.running = False

    def resume(self) -> None:
        self.running = True


class LoopbackCanDriver:
    """A bus with bounded queues.

    ``transmit()`` places a message in the transmit queue and records it in
    ``sent``, the unbounded history of everything accepted. The transmit
    queue goes out on the bus whenever the driver is polled with
    ``receive()``, once per bus step. ``inject()`` places a message in the
    receive queue as if it arrived from the bus.
    """

    def __init__(self) -> None:
        self.baud_rate: int | None = None
        self.rx_queue_len = 0
        self.tx_queue_len = 0
        self._rx: deque[CanMessage] = deque()
        self._tx: deque[CanMessage] = deque()
        self.sent: list[CanMessage] = []

    def start(self, baud_rate: int, rx_queue_len: int, tx_queue_len: int) -> None:
        self.baud_rate = baud_rate
        self.rx_queue_len = rx_queue_len
        self.tx_queue_len = tx_queue_len

    def inject(self, message: CanMessage) -> bool:
        """Queue an inbound message. False (dropped) if the receive queue is full."""
        if len(self._rx) >= self.rx_queue_len:
            return False
        self._rx.append(message)
        return True

    def receive(self) -> CanMessage | None:
        self.flush()
        return self._rx.popleft() if self._rx else None

    def transmit(self, message: CanMessage) -> bool:
        if len(self._tx) >= self.tx_queue_len:
            return False
        self._tx.append(message)
        self.sent.append(message)
        return True

    def flush(self) -> None:
        """Put every queued outbound message on the bus."""
        self._tx.clear()

    @property
    def pending(self) -> int:
        return len(self._rx)

    @property
    def pending_tx(self) -> int:
        return len(self._tx)

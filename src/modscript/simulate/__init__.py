"""modscript simulate — in-memory drivers for running modules off-target.

Example::

    from modscript.modules import PwmOutput
    from modscript.simulate import SimulatedPwmDriver

    driver = SimulatedPwmDriver()
    led = PwmOutput("led", driver, pin=2, timer=0, channel=0)
"""

from ._drivers import LoopbackCanDriver, SimulatedPwmDriver

__all__ = ["LoopbackCanDriver", "SimulatedPwmDriver"]

"""modscript — a typed expression engine for scripting hardware modules."""

__version__ = "0.1.0"

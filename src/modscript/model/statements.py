"""Statements issued against a script context.

Scripts only ever assign values or invoke module methods; there is no
control flow in the language.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .expressions import Expression


class VariableTarget(BaseModel):
    kind: Literal["variable"] = "variable"
    name: str


class PropertyTarget(BaseModel):
    kind: Literal["property"] = "property"
    module: str
    property: str


Target = Annotated[
    Union[VariableTarget, PropertyTarget],
    Field(discriminator="kind"),
]


class Assignment(BaseModel):
    kind: Literal["assignment"] = "assignment"
    target: Target
    value: Expression


class MethodCall(BaseModel):
    """Out-of-band module method invocation, e.g. ``led.on()``."""

    kind: Literal["method_call"] = "method_call"
    module: str
    method: str
    arguments: list[Expression] = []


Statement = Annotated[
    Union[Assignment, MethodCall],
    Field(discriminator="kind"),
]

"""Typed storage cells.

A Variable holds exactly one payload matching its ``kind``. Writes go through
pydantic assignment validation, so a cell can never hold a payload of another
kind. Cells are owned by a module (as properties) or by a script context; the
expression engine only reads them.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)

from .types import Type

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

Int64 = Annotated[StrictInt, Field(ge=INT64_MIN, le=INT64_MAX)]


class BaseVariable(BaseModel):
    """Common configuration for all variable cells."""

    model_config = ConfigDict(validate_assignment=True)

    kind: Type
    value: object


class BooleanVariable(BaseVariable):
    kind: Literal["boolean"] = "boolean"
    value: StrictBool = False


class IntegerVariable(BaseVariable):
    """64-bit signed integer cell."""

    kind: Literal["integer"] = "integer"
    value: Int64 = 0


class NumberVariable(BaseVariable):
    """64-bit float cell. Integer writes are widened."""

    kind: Literal["number"] = "number"
    value: StrictFloat = 0.0

    @field_validator("value", mode="before")
    @classmethod
    def _widen_integers(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        return value


class StringVariable(BaseVariable):
    kind: Literal["string"] = "string"
    value: StrictStr = ""


Variable = Annotated[
    Union[BooleanVariable, IntegerVariable, NumberVariable, StringVariable],
    Field(discriminator="kind"),
]

_VARIABLE_CLASSES: dict[Type, type[BaseVariable]] = {
    Type.BOOLEAN: BooleanVariable,
    Type.INTEGER: IntegerVariable,
    Type.NUMBER: NumberVariable,
    Type.STRING: StringVariable,
}


def make_variable(kind: Type, value: object = None) -> BaseVariable:
    """Create a cell of *kind*, holding *value* or the kind's default."""
    cls = _VARIABLE_CLASSES[Type(kind)]
    if value is None:
        return cls()
    return cls(value=value)

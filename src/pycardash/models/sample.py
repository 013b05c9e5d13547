"""Serial sensor sample model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pycardash.models._base import CarDashBaseModel
from pycardash.normalize import float_or_default


class SensorSample(CarDashBaseModel):
    """One reading of the serial sensor board.

    Every field is a float and defaults to ``0.0`` when the source record
    omits it or carries something that is not a finite number.

    Parameters
    ----------
    temperature : float
        Wire key ``temp``.
    humidity : float
        Wire key ``hum``.
    pressure : float
        Wire key ``pres``.
    voltage : float
        Wire key ``volt``.
    custom1 : float
        Wire key ``c1``.
    custom2 : float
        Wire key ``c2``.
    """

    temperature: float = Field(default=0.0, validation_alias=AliasChoices("temp", "temperature"))
    humidity: float = Field(default=0.0, validation_alias=AliasChoices("hum", "humidity"))
    pressure: float = Field(default=0.0, validation_alias=AliasChoices("pres", "pressure"))
    voltage: float = Field(default=0.0, validation_alias=AliasChoices("volt", "voltage"))
    custom1: float = Field(default=0.0, validation_alias=AliasChoices("c1", "custom1"))
    custom2: float = Field(default=0.0, validation_alias=AliasChoices("c2", "custom2"))

    @field_validator("temperature", "humidity", "pressure", "voltage", "custom1", "custom2", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float:
        return float_or_default(value)

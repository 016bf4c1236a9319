"""Pydantic schemas for document serial numbers (stored as JSON under app_config.serial_number_config)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

YearFormat = Literal["YY", "YYYY"]
ResetFrequency = Literal["yearly", "monthly", "never"]


class SerialNumberConfig(BaseModel):
    """
    Formatting and counter state for the serial number generator.

    Serialized with camelCase keys (prefix, includeYear, currentCounter, ...)
    to stay compatible with configs written by earlier releases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    prefix: str = Field(default="WB", max_length=32)
    separator: str = Field(default="-", max_length=4)
    include_year: bool = True
    include_month: bool = False
    year_format: YearFormat = "YYYY"
    counter_start: int = Field(default=1, ge=0)
    counter_padding: int = Field(default=3, ge=0, le=12)
    current_counter: int = Field(default=1, ge=0)
    reset_frequency: ResetFrequency = "yearly"
    last_reset_date: datetime | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class SerialNumberConfigUpdate(SerialNumberConfig):
    """PUT body: a full config plus an optional explicit counter reset."""

    reset_counter_now: bool = False


class SerialNumberPreviewRequest(BaseModel):
    """Partial config to preview; omitted fields take the defaults."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    prefix: str | None = Field(default=None, max_length=32)
    separator: str | None = Field(default=None, max_length=4)
    include_year: bool | None = None
    include_month: bool | None = None
    year_format: YearFormat | None = None
    counter_start: int | None = Field(default=None, ge=0)
    counter_padding: int | None = Field(default=None, ge=0, le=12)
    current_counter: int | None = Field(default=None, ge=0)


class SerialNumberResponse(BaseModel):
    """A generated or previewed serial number."""

    serial_number: str

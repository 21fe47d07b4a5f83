"""Pydantic models representing property inputs and stored properties."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..utils.coerce import to_float, to_number

MONEY_FIELDS = (
    "purchase_price",
    "monthly_rent",
    "monthly_hoa",
    "annual_taxes",
    "annual_insurance",
    "annual_maintenance",
    "management_fees",
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PropertyInputs(CamelModel):
    """Canonical calculator input.

    Monetary fields are coerced rather than validated: blanks, junk strings and
    non-finite numbers all become ``0`` (``market_value`` becomes ``None``), so
    a half-filled draft still yields displayable numbers.
    """

    postcode: str = ""
    purchase_price: float = 0.0
    market_value: Optional[float] = None
    monthly_rent: float = 0.0
    monthly_hoa: float = 0.0
    annual_taxes: float = 0.0
    annual_insurance: float = 0.0
    annual_maintenance: float = 0.0
    management_fees: float = 0.0

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def _coerce_money(cls, value: Any) -> float:
        return to_number(value)

    @field_validator("market_value", mode="before")
    @classmethod
    def _coerce_market_value(cls, value: Any) -> Optional[float]:
        return to_float(value)

    @field_validator("postcode", mode="before")
    @classmethod
    def _coerce_postcode(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()


NumericInput = Optional[Union[float, str]]


class PropertyCreate(CamelModel):
    """Request body for persisting a property; rejects malformed numbers."""

    postcode: str = Field(..., min_length=1)
    purchase_price: NumericInput = None
    market_value: NumericInput = None
    monthly_rent: NumericInput = None
    monthly_hoa: NumericInput = None
    annual_taxes: NumericInput = None
    annual_insurance: NumericInput = None
    annual_maintenance: NumericInput = None
    management_fees: NumericInput = None

    @field_validator("postcode")
    @classmethod
    def _postcode_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Postcode is required")
        return value

    @field_validator(*MONEY_FIELDS, mode="after")
    @classmethod
    def _numeric_or_empty(cls, value: NumericInput) -> Optional[float]:
        if value is None or value == "":
            return None
        number = to_float(value)
        if number is None:
            raise ValueError("Must be a valid number")
        return number

    @field_validator("market_value", mode="after")
    @classmethod
    def _positive_or_empty(cls, value: NumericInput) -> Optional[float]:
        if value is None or value == "":
            return None
        number = to_float(value)
        if number is None or number <= 0:
            raise ValueError("Must be a valid number greater than 0")
        return number

    @field_validator("management_fees", mode="after")
    @classmethod
    def _non_negative_fees(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 0:
            raise ValueError("Must be a valid number greater than or equal to 0")
        return value

    def to_inputs(self) -> PropertyInputs:
        return PropertyInputs.model_validate(self.model_dump())


class Property(PropertyInputs):
    id: int
    created_at: datetime


class PropertyListResponse(CamelModel):
    items: List[Property]
    total: int

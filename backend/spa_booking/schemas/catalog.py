# backend/spa_booking/schemas/catalog.py
"""Catalog schemas: programs and packages."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import DEFAULT_CURRENCY
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel


def _non_negative(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v < 0:
        raise ValueError("Amount must not be negative")
    return v


def _currency_code(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    code = v.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError("Currency must be a 3-letter ISO code")
    return code


def _unique_durations(options: Optional[List["DurationOption"]]) -> None:
    if not options:
        return
    minutes = [o.duration_minutes for o in options]
    if len(minutes) != len(set(minutes)):
        raise ValueError("Duration options must have distinct duration_minutes")


class DurationOption(StrictRequestModel):
    duration_minutes: int = Field(..., gt=0)
    price: Money

    @field_validator("price")
    @classmethod
    def _check_price(cls, v: Decimal) -> Decimal:
        return _non_negative(v)


class _ProgramFields(StrictRequestModel):
    @field_validator("currency", check_fields=False)
    @classmethod
    def _check_currency(cls, v: Optional[str]) -> Optional[str]:
        return _currency_code(v)

    @model_validator(mode="after")
    def _check_durations(self):
        _unique_durations(getattr(self, "duration_options", None))
        return self


class ProgramCreate(_ProgramFields):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    duration_options: List[DurationOption] = Field(..., min_length=1)
    currency: str = DEFAULT_CURRENCY
    is_active: bool = True


class ProgramUpdate(_ProgramFields):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    duration_options: Optional[List[DurationOption]] = Field(default=None, min_length=1)
    currency: Optional[str] = None
    is_active: Optional[bool] = None


class DurationOptionOut(StandardizedModel):
    duration_minutes: int
    price: Money


class ProgramResponse(StandardizedModel):
    id: str
    name: str
    description: str
    duration_options: List[DurationOptionOut]
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class _PackageFields(StrictRequestModel):
    @field_validator("original_price", "package_price", check_fields=False)
    @classmethod
    def _check_prices(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _non_negative(v)

    @field_validator("currency", check_fields=False)
    @classmethod
    def _check_currency(cls, v: Optional[str]) -> Optional[str]:
        return _currency_code(v)


class PackageCreate(_PackageFields):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    original_price: Money = Decimal("0")
    package_price: Money
    number_of_people: int = Field(default=1, ge=1)
    duration_minutes: int = Field(..., gt=0)
    currency: str = DEFAULT_CURRENCY
    is_active: bool = True


class PackageUpdate(_PackageFields):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    original_price: Optional[Money] = None
    package_price: Optional[Money] = None
    number_of_people: Optional[int] = Field(default=None, ge=1)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    currency: Optional[str] = None
    is_active: Optional[bool] = None


class PackageResponse(StandardizedModel):
    id: str
    name: str
    description: str
    original_price: Money
    package_price: Money
    number_of_people: int
    duration_minutes: int
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

"""
Argument models for the tools that take user input.

Card details are checked here and reduced to a ``PaymentSummary`` before
anything reaches a manager; the full number and the CVV go no further.
"""

import re
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..services.models import PaymentSummary

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
TIME_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"


def clean_card_number(number: str) -> str:
    return re.sub(r"[\s-]", "", number)


def luhn_valid(digits: str) -> bool:
    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = int(ch)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def is_amex(digits: str) -> bool:
    return digits[:2] in ("34", "37")


def parse_expiry(value: str):
    """``MM/YY`` or ``MM/YYYY`` -> (year, month)."""
    match = re.match(r"^\s*(\d{1,2})\s*/\s*(\d{2}|\d{4})\s*$", value)
    if not match:
        raise ValueError("Card expiry must be MM/YY or MM/YYYY")
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError("Card expiry month must be between 01 and 12")
    if year < 100:
        year += 2000
    return year, month


class PrepareBookingArgs(BaseModel):
    attraction_id: int
    number_of_tickets: int = Field(..., ge=1, le=10)
    visit_date: date
    visitor_name: str = Field(..., min_length=1, max_length=100)
    visitor_email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN)
    card_number: str
    card_holder_name: str = Field(..., min_length=1, max_length=100)
    card_expiry: str
    card_cvv: str

    @field_validator("card_number")
    @classmethod
    def _check_card_number(cls, v: str) -> str:
        digits = clean_card_number(v)
        if not digits.isdigit() or not 12 <= len(digits) <= 19:
            raise ValueError("Card number must contain 12 to 19 digits")
        if not luhn_valid(digits):
            raise ValueError("Card number is invalid")
        return digits

    @field_validator("card_expiry")
    @classmethod
    def _check_expiry(cls, v: str) -> str:
        year, month = parse_expiry(v)
        today = datetime.now()
        if (year, month) < (today.year, today.month):
            raise ValueError("Card has expired")
        return v.strip()

    @model_validator(mode="after")
    def _check_cvv(self) -> "PrepareBookingArgs":
        expected = 4 if is_amex(self.card_number) else 3
        if not self.card_cvv.isdigit() or len(self.card_cvv) != expected:
            raise ValueError(f"Card CVV must be {expected} digits")
        return self

    def payment_summary(self) -> PaymentSummary:
        return PaymentSummary(
            card_last_four=self.card_number[-4:],
            card_holder_name=self.card_holder_name,
            card_expiry=self.card_expiry,
        )


class PrepareReservationArgs(BaseModel):
    attraction_id: int
    number_of_people: int = Field(..., ge=1, le=20)
    reservation_date: date
    reservation_time: str = Field(..., pattern=TIME_PATTERN)
    guest_name: str = Field(..., min_length=1, max_length=100)
    guest_email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN)
    special_requests: Optional[str] = Field(None, max_length=500)


class RecommendArgs(BaseModel):
    destination_name: Optional[str] = None
    destination_id: Optional[int] = None
    user_id: Optional[str] = None
    preferences: List[str] = Field(default_factory=list)
    travel_type: str = "general"
    age_group: str = "adult"
    budget: str = "moderate"
    limit: int = Field(6, ge=1, le=20)


class LocateATMArgs(BaseModel):
    location: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    destination_name: Optional[str] = Field(None, max_length=100)
    attraction_id: Optional[int] = None
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, min_length=3, max_length=3)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance: float = Field(5, ge=1, le=50)
    distance_unit: Literal["MILE", "KM"] = "MILE"
    limit: int = Field(10, ge=1, le=50)

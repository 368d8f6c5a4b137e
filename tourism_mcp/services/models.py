from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DINING_CATEGORIES = frozenset({"Restaurant", "Cafe"})


class LifecycleStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Destination(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    name: str
    country: str
    type: str
    description: str
    latitude: float
    longitude: float


class Attraction(BaseModel):
    """Read-only catalog entry. ``price`` and ``currency`` are set only when bookable."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    name: str
    category: str
    description: str
    latitude: float
    longitude: float
    destination_id: int
    bookable: bool = False
    price: Optional[float] = None
    currency: Optional[str] = None
    duration_minutes: Optional[int] = None
    opening_hours: Optional[str] = None
    booking_details: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @property
    def is_dining(self) -> bool:
        return self.category in DINING_CATEGORIES


class PaymentSummary(BaseModel):
    """Masked card details. Never holds the full number or the CVV."""

    model_config = ConfigDict(extra="forbid")

    card_last_four: str = Field(..., min_length=4, max_length=4)
    card_holder_name: str
    card_expiry: str


class Booking(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_id: str
    attraction_id: int
    attraction_name: str
    category: str
    number_of_tickets: int = Field(..., ge=1)
    price_per_ticket: float
    total_amount: float
    currency: str
    visit_date: str
    visitor_name: str
    visitor_email: str
    payment_details: Optional[PaymentSummary] = None
    status: LifecycleStatus = LifecycleStatus.PENDING
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    ticket_numbers: List[str] = Field(default_factory=list)
    payment_transaction_id: Optional[str] = None
    booking_details: Optional[str] = None
    opening_hours: Optional[str] = None
    duration_minutes: Optional[int] = None


class Location(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float
    longitude: float


class Reservation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reservation_id: str
    attraction_id: int
    attraction_name: str
    category: str
    number_of_people: int = Field(..., ge=1)
    reservation_date: str
    reservation_time: str
    guest_name: str
    guest_email: str
    special_requests: Optional[str] = None
    status: LifecycleStatus = LifecycleStatus.PENDING
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    confirmation_number: Optional[str] = None
    opening_hours: Optional[str] = None
    location: Location


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    preferences: List[str] = Field(default_factory=list)
    travel_type: str = "general"
    age_group: str = "adult"
    budget: str = "moderate"

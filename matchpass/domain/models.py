"""Domain records handed between the services and the stores.

These are plain immutable values. SQLAlchemy rows live in
matchpass/infrastructure/db/models.py and never leave the SQL store.
"""

from dataclasses import dataclass
from datetime import datetime

from matchpass.domain.state_machine import BookingStatus


@dataclass(frozen=True)
class Match:
    id: int
    team1: str
    team2: str
    team1_logo: str | None
    team2_logo: str | None
    venue: str
    stadium: str
    date: str
    time: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class TicketType:
    id: int
    match_id: int
    name: str
    description: str | None
    price: int
    total_seats: int
    available_seats: int
    created_at: datetime

    @property
    def sold_seats(self) -> int:
        return self.total_seats - self.available_seats


@dataclass(frozen=True)
class Booking:
    id: int
    booking_reference: str
    match_id: int
    ticket_type_id: int
    full_name: str
    email: str
    phone: str
    quantity: int
    base_amount: int
    gst: int
    service_fee: int
    total_amount: int
    status: BookingStatus
    payment_method: str | None
    utr_number: str | None
    created_at: datetime


@dataclass(frozen=True)
class PaymentChannel:
    """A UPI destination customers pay to."""

    id: int
    upi_id: str
    qr_code: str | None
    display_name: str | None
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class AdminIdentity:
    id: int
    username: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class AdminCredential:
    """Stored admin record including the bcrypt hash. Never returned to callers."""

    identity: AdminIdentity
    password_hash: bytes


# -----------------------------
# Commands
# -----------------------------
@dataclass(frozen=True)
class NewMatch:
    team1: str
    team2: str
    venue: str
    stadium: str
    date: str
    time: str
    team1_logo: str | None = None
    team2_logo: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class NewTicketType:
    match_id: int
    name: str
    price: int
    total_seats: int
    description: str | None = None
    available_seats: int | None = None


@dataclass(frozen=True)
class CustomerDetails:
    full_name: str
    email: str
    phone: str


@dataclass(frozen=True)
class CreateBookingCommand:
    match_id: int
    ticket_type_id: int
    customer: CustomerDetails
    quantity: int


@dataclass(frozen=True)
class NewBooking:
    """Fully priced booking ready to be inserted by a store."""

    booking_reference: str
    match_id: int
    ticket_type_id: int
    full_name: str
    email: str
    phone: str
    quantity: int
    base_amount: int
    gst: int
    service_fee: int
    total_amount: int
    status: BookingStatus = BookingStatus.PENDING


@dataclass(frozen=True)
class NewPaymentChannel:
    upi_id: str
    qr_code: str | None = None
    display_name: str | None = None
    is_active: bool = True


# Fields an admin patch may touch, per record type.
MATCH_PATCH_FIELDS = frozenset(
    {
        "team1",
        "team2",
        "team1_logo",
        "team2_logo",
        "venue",
        "stadium",
        "date",
        "time",
        "is_active",
    }
)
TICKET_TYPE_PATCH_FIELDS = frozenset({"name", "description", "price", "total_seats"})
PAYMENT_CHANNEL_PATCH_FIELDS = frozenset({"upi_id", "qr_code", "display_name", "is_active"})

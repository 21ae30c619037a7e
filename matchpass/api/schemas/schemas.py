from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from matchpass.domain.limits import (
    CUSTOMER_NAME_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    PAYMENT_METHOD_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    SCHEDULE_MAX_LENGTH,
    TEAM_MAX_LENGTH,
    TICKET_NAME_MAX_LENGTH,
    UPI_ID_MAX_LENGTH,
    UTR_MAX_LENGTH,
    VENUE_MAX_LENGTH,
)
from matchpass.domain.state_machine import BookingStatus


# -----------------------------
# Requests
# -----------------------------
class MatchCreate(BaseModel):
    team1: str = Field(min_length=1, max_length=TEAM_MAX_LENGTH)
    team2: str = Field(min_length=1, max_length=TEAM_MAX_LENGTH)
    team1_logo: str | None = None
    team2_logo: str | None = None
    venue: str = Field(min_length=1, max_length=VENUE_MAX_LENGTH)
    stadium: str = Field(min_length=1, max_length=VENUE_MAX_LENGTH)
    date: str = Field(min_length=1, max_length=SCHEDULE_MAX_LENGTH)
    time: str = Field(min_length=1, max_length=SCHEDULE_MAX_LENGTH)
    is_active: bool = True


class MatchUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    team1: str | None = Field(default=None, max_length=TEAM_MAX_LENGTH)
    team2: str | None = Field(default=None, max_length=TEAM_MAX_LENGTH)
    team1_logo: str | None = None
    team2_logo: str | None = None
    venue: str | None = Field(default=None, max_length=VENUE_MAX_LENGTH)
    stadium: str | None = Field(default=None, max_length=VENUE_MAX_LENGTH)
    date: str | None = Field(default=None, max_length=SCHEDULE_MAX_LENGTH)
    time: str | None = Field(default=None, max_length=SCHEDULE_MAX_LENGTH)
    is_active: bool | None = None


class TicketTypeCreate(BaseModel):
    match_id: int
    name: str = Field(min_length=1, max_length=TICKET_NAME_MAX_LENGTH)
    description: str | None = None
    price: int = Field(ge=0)
    total_seats: int = Field(ge=0)
    available_seats: int | None = Field(default=None, ge=0)


class TicketTypeUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=TICKET_NAME_MAX_LENGTH)
    description: str | None = None
    price: int | None = Field(default=None, ge=0)
    total_seats: int | None = Field(default=None, ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(gt=0)


class BookingRequest(BaseModel):
    match_id: int
    ticket_type_id: int
    full_name: str = Field(min_length=1, max_length=CUSTOMER_NAME_MAX_LENGTH)
    email: str = Field(min_length=3, max_length=EMAIL_MAX_LENGTH)
    phone: str = Field(min_length=1, max_length=PHONE_MAX_LENGTH)
    quantity: int = Field(gt=0)


class PaymentRequest(BaseModel):
    payment_method: str = Field(min_length=1, max_length=PAYMENT_METHOD_MAX_LENGTH)
    utr_number: str = Field(min_length=1, max_length=UTR_MAX_LENGTH)


class BookingStatusRequest(BaseModel):
    # Anything else is rejected by the lifecycle manager with InvalidStatusError.
    status: str


class PaymentChannelCreate(BaseModel):
    upi_id: str = Field(min_length=1, max_length=UPI_ID_MAX_LENGTH)
    qr_code: str | None = None
    display_name: str | None = Field(default=None, max_length=DISPLAY_NAME_MAX_LENGTH)
    is_active: bool = True


class PaymentChannelUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    upi_id: str | None = Field(default=None, max_length=UPI_ID_MAX_LENGTH)
    qr_code: str | None = None
    display_name: str | None = Field(default=None, max_length=DISPLAY_NAME_MAX_LENGTH)
    is_active: bool | None = None


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


# -----------------------------
# Responses
# -----------------------------
class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class TicketTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    match_id: int
    name: str
    description: str | None
    price: int
    total_seats: int
    available_seats: int
    created_at: datetime


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class PaymentChannelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    upi_id: str
    qr_code: str | None
    display_name: str | None
    is_active: bool
    created_at: datetime


class AdminResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str

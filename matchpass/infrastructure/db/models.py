# matchpass/infrastructure/db/models.py

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from matchpass.domain.limits import (
    ADMIN_NAME_MAX_LENGTH,
    BOOKING_REFERENCE_MAX_LENGTH,
    CUSTOMER_NAME_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    PAYMENT_METHOD_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    SCHEDULE_MAX_LENGTH,
    TEAM_MAX_LENGTH,
    TICKET_NAME_MAX_LENGTH,
    UPI_ID_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    UTR_MAX_LENGTH,
    VENUE_MAX_LENGTH,
)
from matchpass.domain.state_machine import BookingStatus
from matchpass.infrastructure.db.session import Base


class AdminUserRow(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH), nullable=False, unique=True
    )
    password_hash: Mapped[bytes] = mapped_column(LargeBinary(60), nullable=False)
    name: Mapped[str] = mapped_column(String(ADMIN_NAME_MAX_LENGTH), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class MatchRow(Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team1: Mapped[str] = mapped_column(String(TEAM_MAX_LENGTH), nullable=False)
    team2: Mapped[str] = mapped_column(String(TEAM_MAX_LENGTH), nullable=False)
    team1_logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    team2_logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    venue: Mapped[str] = mapped_column(String(VENUE_MAX_LENGTH), nullable=False)
    stadium: Mapped[str] = mapped_column(String(VENUE_MAX_LENGTH), nullable=False)
    # Display strings, e.g. "10 April 2025" / "7:30 PM IST".
    date: Mapped[str] = mapped_column(String(SCHEDULE_MAX_LENGTH), nullable=False)
    time: Mapped[str] = mapped_column(String(SCHEDULE_MAX_LENGTH), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class TicketTypeRow(Base):
    __tablename__ = "ticket_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("matches.id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(TICKET_NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "match_id",
            "name",
            name="uq_ticket_type_match_id_name",
        ),
        CheckConstraint("price >= 0", name="ck_ticket_price_nonnegative"),
        CheckConstraint("total_seats >= 0", name="ck_total_seats_nonnegative"),
        CheckConstraint("available_seats >= 0", name="ck_available_seats_nonnegative"),
        CheckConstraint("available_seats <= total_seats", name="ck_available_lte_total"),
    )


class BookingRow(Base):
    """
    Booking table reflecting domain state.
    Domain controls transitions.
    DB stores current state safely.
    """

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_reference: Mapped[str] = mapped_column(
        String(BOOKING_REFERENCE_MAX_LENGTH), nullable=False
    )
    match_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("matches.id"),
        nullable=False,
    )
    ticket_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("ticket_types.id"),
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(CUSTOMER_NAME_MAX_LENGTH), nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH), nullable=False, index=True
    )
    phone: Mapped[str] = mapped_column(String(PHONE_MAX_LENGTH), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    base_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    gst: Mapped[int] = mapped_column(Integer, nullable=False)
    service_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(PAYMENT_METHOD_MAX_LENGTH), nullable=True
    )
    utr_number: Mapped[str | None] = mapped_column(
        String(UTR_MAX_LENGTH), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "booking_reference",
            name="uq_booking_reference",
        ),
        CheckConstraint(
            "quantity > 0",
            name="ck_quantity_positive",
        ),
    )


class PaymentChannelRow(Base):
    __tablename__ = "payment_channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    upi_id: Mapped[str] = mapped_column(String(UPI_ID_MAX_LENGTH), nullable=False)
    qr_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_name: Mapped[str | None] = mapped_column(
        String(DISPLAY_NAME_MAX_LENGTH), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

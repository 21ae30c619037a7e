# tests/unit/test_booking_service.py

import pytest

from matchpass.application.booking_service import BookingService
from matchpass.domain.exceptions import (
    InsufficientInventoryError,
    InvalidInputError,
    InvalidStateTransitionError,
    InvalidStatusError,
    NotFoundError,
)
from matchpass.domain.limits import (
    CUSTOMER_NAME_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    PAYMENT_METHOD_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    UTR_MAX_LENGTH,
)
from matchpass.domain.models import CreateBookingCommand, CustomerDetails, NewMatch
from matchpass.domain.references import BookingReferenceGenerator
from matchpass.domain.state_machine import BookingStatus


def _command(ticket_type, quantity=1, email="fan@example.com", **customer):
    return CreateBookingCommand(
        match_id=ticket_type.match_id,
        ticket_type_id=ticket_type.id,
        customer=CustomerDetails(
            full_name=customer.get("full_name", "Virat Fan"),
            email=email,
            phone=customer.get("phone", "9876543210"),
        ),
        quantity=quantity,
    )


# ---------------------
# CREATE
# ---------------------

def test_create_booking_prices_and_reserves(services, make_ticket_type):
    ticket_type = make_ticket_type(total_seats=10, price=99_900)

    booking = services.bookings.create_booking(_command(ticket_type, quantity=2))

    assert booking.status == BookingStatus.PENDING
    assert booking.booking_reference.startswith("IPLBK")
    assert booking.base_amount == 199_800
    assert booking.gst == 35_964
    assert booking.service_fee == 3_996
    assert booking.total_amount == 239_760
    assert booking.payment_method is None
    assert booking.utr_number is None
    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 8


def test_customer_fields_are_trimmed(services, make_ticket_type):
    ticket_type = make_ticket_type()

    booking = services.bookings.create_booking(
        _command(ticket_type, email="  fan@example.com ", full_name=" Virat Fan ")
    )

    assert booking.email == "fan@example.com"
    assert booking.full_name == "Virat Fan"


def test_three_seats_then_one_more(services, make_ticket_type):
    ticket_type = make_ticket_type(total_seats=3)

    services.bookings.create_booking(_command(ticket_type, quantity=3))

    with pytest.raises(InsufficientInventoryError):
        services.bookings.create_booking(_command(ticket_type, quantity=1))

    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 0
    assert len(services.bookings.list_bookings()) == 1


@pytest.mark.parametrize("field", ["full_name", "email", "phone"])
def test_blank_customer_field_is_rejected(services, make_ticket_type, field):
    ticket_type = make_ticket_type()
    customer = {"full_name": "Virat Fan", "email": "fan@example.com", "phone": "98765"}
    customer[field] = "   "

    with pytest.raises(InvalidInputError):
        services.bookings.create_booking(_command(ticket_type, **customer))

    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 10


@pytest.mark.parametrize("quantity", [0, -3])
def test_non_positive_quantity_is_rejected(services, make_ticket_type, quantity):
    ticket_type = make_ticket_type()

    with pytest.raises(InvalidInputError):
        services.bookings.create_booking(_command(ticket_type, quantity=quantity))


def test_unknown_match(services, make_ticket_type):
    ticket_type = make_ticket_type()
    command = _command(ticket_type)

    with pytest.raises(NotFoundError):
        services.bookings.create_booking(
            CreateBookingCommand(
                match_id=999,
                ticket_type_id=command.ticket_type_id,
                customer=command.customer,
                quantity=1,
            )
        )


def test_ticket_type_of_another_match_is_not_found(services, make_ticket_type):
    other = services.catalog.create_match(
        NewMatch(
            team1="Chennai Super Kings",
            team2="Kolkata Knight Riders",
            venue="M.A. Chidambaram Stadium, Chennai, Tamil Nadu",
            stadium="M.A. Chidambaram Stadium",
            date="11 April 2025",
            time="7:30 PM IST",
        )
    )
    ticket_type = make_ticket_type()
    command = _command(ticket_type)

    with pytest.raises(NotFoundError):
        services.bookings.create_booking(
            CreateBookingCommand(
                match_id=other.id,
                ticket_type_id=ticket_type.id,
                customer=command.customer,
                quantity=1,
            )
        )

    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 10


def test_inactive_match_is_not_bookable(services, match, make_ticket_type):
    ticket_type = make_ticket_type()
    services.catalog.update_match(match.id, {"is_active": False})

    with pytest.raises(InvalidInputError):
        services.bookings.create_booking(_command(ticket_type))


def test_duplicate_reference_is_retried(services, store, make_ticket_type):
    ticket_type = make_ticket_type()
    tokens = iter(["AAAAAA", "AAAAAA", "BBBBBB"])
    bookings = BookingService(
        store,
        services.inventory,
        reference_generator=BookingReferenceGenerator(
            clock_ms=lambda: 1744271234567,
            token=lambda: next(tokens),
        ),
    )

    first = bookings.create_booking(_command(ticket_type))
    second = bookings.create_booking(_command(ticket_type))

    assert first.booking_reference == "IPLBK1744271234567AAAAAA"
    assert second.booking_reference == "IPLBK1744271234567BBBBBB"


def test_reference_exhaustion_rolls_back_the_reservation(services, store, make_ticket_type):
    ticket_type = make_ticket_type(total_seats=5)
    bookings = BookingService(
        store,
        services.inventory,
        reference_generator=BookingReferenceGenerator(
            clock_ms=lambda: 1, token=lambda: "FFFFFF"
        ),
    )
    bookings.create_booking(_command(ticket_type))

    with pytest.raises(RuntimeError):
        bookings.create_booking(_command(ticket_type, quantity=2))

    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 4


# ---------------------
# PAYMENT PROOF
# ---------------------

def test_attach_payment_moves_to_payment_pending(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type(), quantity=2))

    updated = services.bookings.attach_payment(booking.booking_reference, "UPI", "123456789012")

    assert updated.status == BookingStatus.PAYMENT_PENDING
    assert updated.payment_method == "UPI"
    assert updated.utr_number == "123456789012"
    assert updated.total_amount == booking.total_amount
    assert updated.quantity == booking.quantity


def test_resubmitting_payment_overwrites_proof(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))
    services.bookings.attach_payment(booking.booking_reference, "UPI", "111")

    updated = services.bookings.attach_payment(booking.booking_reference, "UPI", "222")

    assert updated.status == BookingStatus.PAYMENT_PENDING
    assert updated.utr_number == "222"


def test_attach_payment_requires_both_fields(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))

    with pytest.raises(InvalidInputError):
        services.bookings.attach_payment(booking.booking_reference, "UPI", " ")

    assert services.bookings.get_booking(booking.booking_reference).status == BookingStatus.PENDING


def test_attach_payment_unknown_booking(services):
    with pytest.raises(NotFoundError):
        services.bookings.attach_payment("IPLBK0000", "UPI", "123")


def test_attach_payment_after_decision_is_refused(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))
    services.bookings.set_status(booking.booking_reference, "approved")

    with pytest.raises(InvalidStateTransitionError):
        services.bookings.attach_payment(booking.booking_reference, "UPI", "123")


# ---------------------
# ADMIN STATUS
# ---------------------

def test_approve_after_payment(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))
    services.bookings.attach_payment(booking.booking_reference, "UPI", "123")

    approved = services.bookings.set_status(booking.booking_reference, "approved")

    assert approved.status == BookingStatus.APPROVED
    assert approved.utr_number == "123"


def test_rejection_keeps_seats_sold(services, make_ticket_type):
    ticket_type = make_ticket_type(total_seats=10)
    booking = services.bookings.create_booking(_command(ticket_type, quantity=4))

    services.bookings.set_status(booking.booking_reference, BookingStatus.REJECTED)

    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 6


def test_decided_booking_cannot_change_again(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))
    services.bookings.set_status(booking.booking_reference, "rejected")

    for status in ("approved", "pending", "rejected"):
        with pytest.raises(InvalidStateTransitionError):
            services.bookings.set_status(booking.booking_reference, status)


def test_same_non_terminal_status_is_a_no_op(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))

    unchanged = services.bookings.set_status(booking.booking_reference, "pending")

    assert unchanged == booking


def test_payment_pending_can_be_sent_back_to_pending(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))
    services.bookings.attach_payment(booking.booking_reference, "UPI", "123")

    reverted = services.bookings.set_status(booking.booking_reference, "pending")

    assert reverted.status == BookingStatus.PENDING


@pytest.mark.parametrize("status", ["confirmed", "payment_pending", ""])
def test_unknown_or_reserved_status_is_rejected(services, make_ticket_type, status):
    booking = services.bookings.create_booking(_command(make_ticket_type()))

    with pytest.raises(InvalidStatusError):
        services.bookings.set_status(booking.booking_reference, status)

    assert services.bookings.get_booking(booking.booking_reference).status == BookingStatus.PENDING


def test_set_status_unknown_booking(services):
    with pytest.raises(NotFoundError):
        services.bookings.set_status("IPLBK0000", "approved")


# ---------------------
# READS
# ---------------------

def test_list_by_email_is_newest_first(services, make_ticket_type):
    ticket_type = make_ticket_type()
    first = services.bookings.create_booking(_command(ticket_type, email="a@example.com"))
    services.bookings.create_booking(_command(ticket_type, email="b@example.com"))
    third = services.bookings.create_booking(_command(ticket_type, email="a@example.com"))

    found = services.bookings.list_by_email("a@example.com")

    assert [b.booking_reference for b in found] == [
        third.booking_reference,
        first.booking_reference,
    ]
    assert services.bookings.list_by_email("nobody@example.com") == []


def test_list_bookings_returns_everything_newest_first(services, make_ticket_type):
    ticket_type = make_ticket_type()
    created = [services.bookings.create_booking(_command(ticket_type)) for _ in range(3)]

    listed = services.bookings.list_bookings()

    assert [b.id for b in listed] == [b.id for b in reversed(created)]


def test_get_booking_unknown(services):
    with pytest.raises(NotFoundError):
        services.bookings.get_booking("IPLBK0000")


def test_repeated_reads_return_the_same_record(services, make_ticket_type):
    created = services.bookings.create_booking(_command(make_ticket_type(), quantity=2))

    reads = [services.bookings.get_booking(created.booking_reference) for _ in range(3)]

    assert reads == [created, created, created]
    assert services.catalog.get_ticket_type(created.ticket_type_id).available_seats == 8


# ---------------------
# COLUMN WIDTHS
# ---------------------

def test_overlong_payment_method_is_invalid_input(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))

    with pytest.raises(InvalidInputError):
        services.bookings.attach_payment(
            booking.booking_reference,
            "U" * (PAYMENT_METHOD_MAX_LENGTH + 1),
            "123456789012",
        )

    unchanged = services.bookings.get_booking(booking.booking_reference)
    assert unchanged.status == BookingStatus.PENDING
    assert unchanged.payment_method is None


def test_overlong_utr_number_is_invalid_input(services, make_ticket_type):
    booking = services.bookings.create_booking(_command(make_ticket_type()))

    with pytest.raises(InvalidInputError):
        services.bookings.attach_payment(
            booking.booking_reference, "UPI", "9" * (UTR_MAX_LENGTH + 1)
        )


def test_values_at_the_column_width_are_accepted(services, make_ticket_type):
    booking = services.bookings.create_booking(
        _command(make_ticket_type(), phone="9" * PHONE_MAX_LENGTH)
    )

    updated = services.bookings.attach_payment(
        booking.booking_reference,
        "U" * PAYMENT_METHOD_MAX_LENGTH,
        "9" * UTR_MAX_LENGTH,
    )

    assert updated.status == BookingStatus.PAYMENT_PENDING
    assert len(updated.phone) == PHONE_MAX_LENGTH


@pytest.mark.parametrize(
    "field, max_length",
    [
        ("full_name", CUSTOMER_NAME_MAX_LENGTH),
        ("email", EMAIL_MAX_LENGTH),
        ("phone", PHONE_MAX_LENGTH),
    ],
)
def test_overlong_customer_field_reserves_nothing(services, make_ticket_type, field, max_length):
    ticket_type = make_ticket_type(total_seats=10)
    customer = {"full_name": "Virat Fan", "email": "fan@example.com", "phone": "98765"}
    customer[field] = "x" * (max_length + 1)

    with pytest.raises(InvalidInputError):
        services.bookings.create_booking(_command(ticket_type, **customer))

    assert services.catalog.get_ticket_type(ticket_type.id).available_seats == 10
    assert services.bookings.list_bookings() == []

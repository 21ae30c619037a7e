import logging

from matchpass.application.inventory_service import InventoryReservationEngine
from matchpass.domain.exceptions import (
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
)
from matchpass.domain.limits import (
    CUSTOMER_NAME_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    PAYMENT_METHOD_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    UTR_MAX_LENGTH,
    ensure_fits,
)
from matchpass.domain.models import (
    Booking,
    CreateBookingCommand,
    CustomerDetails,
    NewBooking,
)
from matchpass.domain.pricing import FeePolicy
from matchpass.domain.references import BookingReferenceGenerator
from matchpass.domain.state_machine import BookingStateMachine, BookingStatus
from matchpass.infrastructure.repositories.interfaces import Store, UnitOfWork

logger = logging.getLogger(__name__)

MAX_REFERENCE_ATTEMPTS = 5


class BookingService:
    """Application service coordinating the booking lifecycle."""

    def __init__(
        self,
        store: Store,
        inventory: InventoryReservationEngine,
        fee_policy: FeePolicy | None = None,
        reference_generator: BookingReferenceGenerator | None = None,
    ):
        self.store = store
        self.inventory = inventory
        self.fee_policy = fee_policy or FeePolicy()
        self.reference_generator = reference_generator or BookingReferenceGenerator()

    def create_booking(self, command: CreateBookingCommand) -> Booking:
        """
        Reserve seats and record a pending booking in one unit of work.

        Raises:
            InvalidInputError: blank customer fields, non-positive quantity,
                or a match that is no longer open for booking.
            NotFoundError: unknown match, unknown ticket type, or a ticket
                type that belongs to a different match.
            InsufficientInventoryError: fewer seats left than requested.
        """
        customer = _clean_customer(command.customer)
        quantity = command.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInputError("quantity must be a positive integer")

        with self.store.unit_of_work() as uow:
            match = uow.matches.get(command.match_id)
            if match is None:
                raise NotFoundError("Match", command.match_id)
            if not match.is_active:
                raise InvalidInputError(f"Match {match.id} is not open for booking")

            ticket_type = uow.ticket_types.get(command.ticket_type_id)
            if ticket_type is None or ticket_type.match_id != match.id:
                raise NotFoundError("Ticket type", command.ticket_type_id)

            reserved = self.inventory.reserve(uow, ticket_type.id, quantity)
            charges = self.fee_policy.charges_for(reserved.price, quantity)

            booking = uow.bookings.add(
                NewBooking(
                    booking_reference=self._new_reference(uow),
                    match_id=match.id,
                    ticket_type_id=ticket_type.id,
                    full_name=customer.full_name,
                    email=customer.email,
                    phone=customer.phone,
                    quantity=quantity,
                    base_amount=charges.base_amount,
                    gst=charges.gst,
                    service_fee=charges.service_fee,
                    total_amount=charges.total_amount,
                    status=BookingStatus.PENDING,
                )
            )

        logger.info(
            "Booking created. reference=%s ticket_type_id=%s quantity=%s total=%s",
            booking.booking_reference,
            booking.ticket_type_id,
            booking.quantity,
            booking.total_amount,
        )
        return booking

    def attach_payment(
        self,
        booking_reference: str,
        payment_method: str,
        utr_number: str,
    ) -> Booking:
        """
        Record manual payment proof and move the booking to payment_pending.
        Re-submitting proof while payment_pending overwrites the fields.
        Amount fields and quantity are never touched here.
        """
        payment_method = (payment_method or "").strip()
        utr_number = (utr_number or "").strip()
        if not payment_method or not utr_number:
            raise InvalidInputError("Payment method and UTR number are required")
        ensure_fits(payment_method, PAYMENT_METHOD_MAX_LENGTH, "payment_method")
        ensure_fits(utr_number, UTR_MAX_LENGTH, "utr_number")

        with self.store.unit_of_work() as uow:
            booking = self._require(uow, booking_reference, lock=True)

            next_status = booking.status
            if booking.status != BookingStatus.PAYMENT_PENDING:
                BookingStateMachine.validate_transition(
                    booking.status, BookingStatus.PAYMENT_PENDING
                )
                next_status = BookingStatus.PAYMENT_PENDING

            updated = uow.bookings.update(
                booking_reference,
                {
                    "payment_method": payment_method,
                    "utr_number": utr_number,
                    "status": next_status,
                },
            )

        logger.info(
            "Payment proof attached. reference=%s method=%s",
            booking_reference,
            payment_method,
        )
        return updated

    def set_status(self, booking_reference: str, status: str | BookingStatus) -> Booking:
        """
        Admin decision on a booking.

        approved and rejected are terminal: any later call raises
        InvalidStateTransitionError. Setting a non-terminal booking to the
        status it already has changes nothing. Rejection does not restock.
        """
        raw = status.value if isinstance(status, BookingStatus) else status
        target = BookingStateMachine.parse_admin_status(raw)

        with self.store.unit_of_work() as uow:
            booking = self._require(uow, booking_reference, lock=True)

            if BookingStateMachine.is_terminal(booking.status):
                raise InvalidStateTransitionError(
                    from_state=booking.status.value,
                    to_state=target.value,
                )
            if booking.status == target:
                return booking

            BookingStateMachine.validate_transition(booking.status, target)
            updated = uow.bookings.update(booking_reference, {"status": target})

        logger.info(
            "Booking status changed. reference=%s %s -> %s",
            booking_reference,
            booking.status.value,
            target.value,
        )
        return updated

    def get_booking(self, booking_reference: str) -> Booking:
        with self.store.unit_of_work() as uow:
            return self._require(uow, booking_reference)

    def list_by_email(self, email: str) -> list[Booking]:
        with self.store.unit_of_work() as uow:
            return uow.bookings.list_by_email(email)

    def list_bookings(self) -> list[Booking]:
        with self.store.unit_of_work() as uow:
            return uow.bookings.list_all()

    def _require(
        self, uow: UnitOfWork, booking_reference: str, lock: bool = False
    ) -> Booking:
        if lock:
            booking = uow.bookings.get_for_update(booking_reference)
        else:
            booking = uow.bookings.get_by_reference(booking_reference)
        if booking is None:
            raise NotFoundError("Booking", booking_reference)
        return booking

    def _new_reference(self, uow: UnitOfWork) -> str:
        for _ in range(MAX_REFERENCE_ATTEMPTS):
            reference = self.reference_generator()
            if not uow.bookings.reference_exists(reference):
                return reference
        raise RuntimeError("Could not generate a unique booking reference")


def _clean_customer(customer: CustomerDetails) -> CustomerDetails:
    cleaned = CustomerDetails(
        full_name=(customer.full_name or "").strip(),
        email=(customer.email or "").strip(),
        phone=(customer.phone or "").strip(),
    )
    missing = [
        field
        for field in ("full_name", "email", "phone")
        if not getattr(cleaned, field)
    ]
    if missing:
        raise InvalidInputError(f"Missing customer fields: {', '.join(missing)}")
    ensure_fits(cleaned.full_name, CUSTOMER_NAME_MAX_LENGTH, "full_name")
    ensure_fits(cleaned.email, EMAIL_MAX_LENGTH, "email")
    ensure_fits(cleaned.phone, PHONE_MAX_LENGTH, "phone")
    return cleaned

# matchpass/application/inventory_service.py

import logging

from matchpass.domain.exceptions import (
    InsufficientInventoryError,
    InvalidInputError,
    NotFoundError,
)
from matchpass.domain.models import TicketType
from matchpass.infrastructure.repositories.interfaces import Store, UnitOfWork

logger = logging.getLogger(__name__)


def _ensure_positive_quantity(quantity: int) -> None:
    # bool is an int subclass; True must not count as one seat.
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidInputError("quantity must be a positive integer")


class InventoryReservationEngine:
    """
    The only component that changes available_seats.

    reserve() never opens its own transaction: it runs inside the caller's
    unit of work so the seat decrement and the booking insert commit or
    roll back together.
    """

    def __init__(self, store: Store):
        self.store = store

    def reserve(
        self,
        uow: UnitOfWork,
        ticket_type_id: int,
        quantity: int,
    ) -> TicketType:
        _ensure_positive_quantity(quantity)

        if uow.ticket_types.try_decrement_available(ticket_type_id, quantity):
            reserved = uow.ticket_types.get(ticket_type_id)
            logger.info(
                "Reserved seats. ticket_type_id=%s quantity=%s available=%s",
                ticket_type_id,
                quantity,
                reserved.available_seats,
            )
            return reserved

        ticket_type = uow.ticket_types.get(ticket_type_id)
        if ticket_type is None:
            raise NotFoundError("Ticket type", ticket_type_id)

        logger.warning(
            "Reservation rejected. ticket_type_id=%s requested=%s available=%s",
            ticket_type_id,
            quantity,
            ticket_type.available_seats,
        )
        raise InsufficientInventoryError(
            ticket_type_id=ticket_type_id,
            requested=quantity,
            available=ticket_type.available_seats,
        )

    def restock(self, ticket_type_id: int, quantity: int) -> TicketType:
        """
        Admin correction: give seats back, never above total_seats.
        Rejecting a booking does not call this on its own.
        """
        _ensure_positive_quantity(quantity)

        with self.store.unit_of_work() as uow:
            ticket_type = uow.ticket_types.increment_available(ticket_type_id, quantity)
            if ticket_type is None:
                raise NotFoundError("Ticket type", ticket_type_id)

        logger.info(
            "Restocked seats. ticket_type_id=%s quantity=%s available=%s",
            ticket_type_id,
            quantity,
            ticket_type.available_seats,
        )
        return ticket_type

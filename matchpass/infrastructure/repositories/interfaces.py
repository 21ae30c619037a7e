"""Storage capability interfaces (repository + unit of work).

Two stores implement these: an in-memory one (tests, demos) and a
SQLAlchemy one (production). Services depend only on what is defined here
and receive the store explicitly.

Every repository method runs inside the unit of work that produced it.
Leaving the unit of work normally commits; leaving it with an exception
rolls back everything done through it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from matchpass.domain.models import (
    AdminCredential,
    AdminIdentity,
    Booking,
    Match,
    NewBooking,
    NewMatch,
    NewPaymentChannel,
    NewTicketType,
    PaymentChannel,
    TicketType,
)


class MatchRepository(ABC):

    @abstractmethod
    def list_matches(self, active: bool | None = None) -> list[Match]:
        """Return matches ordered by id, optionally filtered on is_active."""

    @abstractmethod
    def get(self, match_id: int) -> Match | None:
        ...

    @abstractmethod
    def add(self, match: NewMatch) -> Match:
        ...

    @abstractmethod
    def update(self, match_id: int, changes: Mapping[str, Any]) -> Match | None:
        ...

    @abstractmethod
    def delete(self, match_id: int) -> bool:
        ...


class TicketTypeRepository(ABC):

    @abstractmethod
    def list_for_match(self, match_id: int) -> list[TicketType]:
        ...

    @abstractmethod
    def get(self, ticket_type_id: int) -> TicketType | None:
        ...

    @abstractmethod
    def exists_for_match(self, match_id: int) -> bool:
        ...

    @abstractmethod
    def name_taken(self, match_id: int, name: str, exclude_id: int | None = None) -> bool:
        ...

    @abstractmethod
    def add(self, ticket_type: NewTicketType) -> TicketType:
        """Insert a ticket type. available_seats must already be resolved."""

    @abstractmethod
    def update(self, ticket_type_id: int, changes: Mapping[str, Any]) -> TicketType | None:
        ...

    @abstractmethod
    def delete(self, ticket_type_id: int) -> bool:
        ...

    @abstractmethod
    def try_decrement_available(self, ticket_type_id: int, quantity: int) -> bool:
        """
        Atomically subtract quantity from available_seats if, and only if,
        at least quantity seats are available. Returns False (and changes
        nothing) otherwise, including when the ticket type does not exist.
        """

    @abstractmethod
    def resize_capacity(self, ticket_type_id: int, total_seats: int) -> bool:
        """
        Set total_seats and shift available_seats by the same delta, in one
        atomic step. Returns False (and changes nothing) if that would leave
        available_seats negative or the ticket type does not exist.
        """

    @abstractmethod
    def increment_available(self, ticket_type_id: int, quantity: int) -> TicketType | None:
        """Add quantity to available_seats, capped at total_seats."""


class BookingRepository(ABC):

    @abstractmethod
    def get_by_reference(self, booking_reference: str) -> Booking | None:
        ...

    @abstractmethod
    def get_for_update(self, booking_reference: str) -> Booking | None:
        """Like get_by_reference, but holds the row until the unit of work ends."""

    @abstractmethod
    def reference_exists(self, booking_reference: str) -> bool:
        ...

    @abstractmethod
    def list_by_email(self, email: str) -> list[Booking]:
        """Exact, case-sensitive match. Newest first."""

    @abstractmethod
    def list_all(self) -> list[Booking]:
        """Newest first."""

    @abstractmethod
    def exists_for_ticket_type(self, ticket_type_id: int) -> bool:
        ...

    @abstractmethod
    def add(self, booking: NewBooking) -> Booking:
        ...

    @abstractmethod
    def update(self, booking_reference: str, changes: Mapping[str, Any]) -> Booking | None:
        ...


class PaymentChannelRepository(ABC):

    @abstractmethod
    def get(self, channel_id: int) -> PaymentChannel | None:
        ...

    @abstractmethod
    def get_active(self) -> PaymentChannel | None:
        ...

    @abstractmethod
    def list_all(self) -> list[PaymentChannel]:
        ...

    @abstractmethod
    def add(self, channel: NewPaymentChannel) -> PaymentChannel:
        ...

    @abstractmethod
    def update(self, channel_id: int, changes: Mapping[str, Any]) -> PaymentChannel | None:
        ...

    @abstractmethod
    def deactivate_all(self, except_id: int | None = None) -> int:
        """Clear is_active on every active channel but except_id. Returns the count."""


class AdminRepository(ABC):

    @abstractmethod
    def get_by_username(self, username: str) -> AdminCredential | None:
        ...

    @abstractmethod
    def add(self, username: str, password_hash: bytes, name: str) -> AdminIdentity:
        ...


class UnitOfWork(ABC):
    matches: MatchRepository
    ticket_types: TicketTypeRepository
    bookings: BookingRepository
    payment_channels: PaymentChannelRepository
    admins: AdminRepository

    def __enter__(self) -> UnitOfWork:
        self._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self._commit()
            else:
                self._rollback()
        finally:
            self._close()

    @abstractmethod
    def _begin(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _rollback(self) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        pass


class Store(ABC):
    """Factory for units of work over one storage backend."""

    @abstractmethod
    def unit_of_work(self) -> UnitOfWork:
        ...

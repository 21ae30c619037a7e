# matchpass/infrastructure/repositories/memory.py

"""In-process store.

All units of work share one re-entrant lock and run one at a time, so the
check-and-decrement in try_decrement_available can never interleave with
another reservation. Tables are snapshotted when a unit of work starts and
restored if it fails.
"""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime, timezone
from typing import Any, Mapping

from matchpass.domain.exceptions import InvalidInputError
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
from matchpass.infrastructure.repositories.interfaces import (
    AdminRepository,
    BookingRepository,
    MatchRepository,
    PaymentChannelRepository,
    Store,
    TicketTypeRepository,
    UnitOfWork,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclasses.dataclass
class _Tables:
    matches: dict[int, Match] = dataclasses.field(default_factory=dict)
    ticket_types: dict[int, TicketType] = dataclasses.field(default_factory=dict)
    bookings: dict[int, Booking] = dataclasses.field(default_factory=dict)
    payment_channels: dict[int, PaymentChannel] = dataclasses.field(default_factory=dict)
    admins: dict[int, AdminCredential] = dataclasses.field(default_factory=dict)
    sequences: dict[str, int] = dataclasses.field(default_factory=dict)

    def next_id(self, table: str) -> int:
        value = self.sequences.get(table, 0) + 1
        self.sequences[table] = value
        return value

    def clone(self) -> _Tables:
        # Records are frozen, so copying the dicts is enough.
        return _Tables(
            matches=dict(self.matches),
            ticket_types=dict(self.ticket_types),
            bookings=dict(self.bookings),
            payment_channels=dict(self.payment_channels),
            admins=dict(self.admins),
            sequences=dict(self.sequences),
        )


class InMemoryMatchRepository(MatchRepository):

    def __init__(self, tables: _Tables):
        self.tables = tables

    def list_matches(self, active: bool | None = None) -> list[Match]:
        matches = sorted(self.tables.matches.values(), key=lambda m: m.id)
        if active is None:
            return matches
        return [m for m in matches if m.is_active == active]

    def get(self, match_id: int) -> Match | None:
        return self.tables.matches.get(match_id)

    def add(self, match: NewMatch) -> Match:
        record = Match(
            id=self.tables.next_id("matches"),
            created_at=_utc_now(),
            **dataclasses.asdict(match),
        )
        self.tables.matches[record.id] = record
        return record

    def update(self, match_id: int, changes: Mapping[str, Any]) -> Match | None:
        existing = self.tables.matches.get(match_id)
        if existing is None:
            return None
        updated = dataclasses.replace(existing, **changes)
        self.tables.matches[match_id] = updated
        return updated

    def delete(self, match_id: int) -> bool:
        return self.tables.matches.pop(match_id, None) is not None


class InMemoryTicketTypeRepository(TicketTypeRepository):

    def __init__(self, tables: _Tables):
        self.tables = tables

    def list_for_match(self, match_id: int) -> list[TicketType]:
        return sorted(
            (t for t in self.tables.ticket_types.values() if t.match_id == match_id),
            key=lambda t: t.id,
        )

    def get(self, ticket_type_id: int) -> TicketType | None:
        return self.tables.ticket_types.get(ticket_type_id)

    def exists_for_match(self, match_id: int) -> bool:
        return any(t.match_id == match_id for t in self.tables.ticket_types.values())

    def name_taken(self, match_id: int, name: str, exclude_id: int | None = None) -> bool:
        return any(
            t.match_id == match_id and t.name == name and t.id != exclude_id
            for t in self.tables.ticket_types.values()
        )

    def add(self, ticket_type: NewTicketType) -> TicketType:
        if self.name_taken(ticket_type.match_id, ticket_type.name):
            raise InvalidInputError(
                f"Ticket type {ticket_type.name!r} already exists for match {ticket_type.match_id}"
            )
        record = TicketType(
            id=self.tables.next_id("ticket_types"),
            match_id=ticket_type.match_id,
            name=ticket_type.name,
            description=ticket_type.description,
            price=ticket_type.price,
            total_seats=ticket_type.total_seats,
            available_seats=ticket_type.available_seats,
            created_at=_utc_now(),
        )
        self.tables.ticket_types[record.id] = record
        return record

    def update(self, ticket_type_id: int, changes: Mapping[str, Any]) -> TicketType | None:
        existing = self.tables.ticket_types.get(ticket_type_id)
        if existing is None:
            return None
        updated = dataclasses.replace(existing, **changes)
        self.tables.ticket_types[ticket_type_id] = updated
        return updated

    def delete(self, ticket_type_id: int) -> bool:
        return self.tables.ticket_types.pop(ticket_type_id, None) is not None

    def try_decrement_available(self, ticket_type_id: int, quantity: int) -> bool:
        existing = self.tables.ticket_types.get(ticket_type_id)
        if existing is None or existing.available_seats < quantity:
            return False
        self.tables.ticket_types[ticket_type_id] = dataclasses.replace(
            existing,
            available_seats=existing.available_seats - quantity,
        )
        return True

    def resize_capacity(self, ticket_type_id: int, total_seats: int) -> bool:
        existing = self.tables.ticket_types.get(ticket_type_id)
        if existing is None:
            return False
        available = existing.available_seats + (total_seats - existing.total_seats)
        if available < 0:
            return False
        self.tables.ticket_types[ticket_type_id] = dataclasses.replace(
            existing,
            total_seats=total_seats,
            available_seats=available,
        )
        return True

    def increment_available(self, ticket_type_id: int, quantity: int) -> TicketType | None:
        existing = self.tables.ticket_types.get(ticket_type_id)
        if existing is None:
            return None
        updated = dataclasses.replace(
            existing,
            available_seats=min(existing.total_seats, existing.available_seats + quantity),
        )
        self.tables.ticket_types[ticket_type_id] = updated
        return updated


class InMemoryBookingRepository(BookingRepository):

    def __init__(self, tables: _Tables):
        self.tables = tables

    def _newest_first(self, bookings) -> list[Booking]:
        return sorted(bookings, key=lambda b: b.id, reverse=True)

    def get_by_reference(self, booking_reference: str) -> Booking | None:
        for booking in self.tables.bookings.values():
            if booking.booking_reference == booking_reference:
                return booking
        return None

    def get_for_update(self, booking_reference: str) -> Booking | None:
        # The store lock is already held for the whole unit of work.
        return self.get_by_reference(booking_reference)

    def reference_exists(self, booking_reference: str) -> bool:
        return self.get_by_reference(booking_reference) is not None

    def list_by_email(self, email: str) -> list[Booking]:
        return self._newest_first(
            b for b in self.tables.bookings.values() if b.email == email
        )

    def list_all(self) -> list[Booking]:
        return self._newest_first(self.tables.bookings.values())

    def exists_for_ticket_type(self, ticket_type_id: int) -> bool:
        return any(b.ticket_type_id == ticket_type_id for b in self.tables.bookings.values())

    def add(self, booking: NewBooking) -> Booking:
        if self.reference_exists(booking.booking_reference):
            raise ValueError(f"Duplicate booking reference {booking.booking_reference}")
        record = Booking(
            id=self.tables.next_id("bookings"),
            payment_method=None,
            utr_number=None,
            created_at=_utc_now(),
            **dataclasses.asdict(booking),
        )
        self.tables.bookings[record.id] = record
        return record

    def update(self, booking_reference: str, changes: Mapping[str, Any]) -> Booking | None:
        existing = self.get_by_reference(booking_reference)
        if existing is None:
            return None
        updated = dataclasses.replace(existing, **changes)
        self.tables.bookings[existing.id] = updated
        return updated


class InMemoryPaymentChannelRepository(PaymentChannelRepository):

    def __init__(self, tables: _Tables):
        self.tables = tables

    def get(self, channel_id: int) -> PaymentChannel | None:
        return self.tables.payment_channels.get(channel_id)

    def get_active(self) -> PaymentChannel | None:
        active = [c for c in self.tables.payment_channels.values() if c.is_active]
        if len(active) != 1:
            return None
        return active[0]

    def list_all(self) -> list[PaymentChannel]:
        return sorted(self.tables.payment_channels.values(), key=lambda c: c.id)

    def add(self, channel: NewPaymentChannel) -> PaymentChannel:
        record = PaymentChannel(
            id=self.tables.next_id("payment_channels"),
            created_at=_utc_now(),
            **dataclasses.asdict(channel),
        )
        self.tables.payment_channels[record.id] = record
        return record

    def update(self, channel_id: int, changes: Mapping[str, Any]) -> PaymentChannel | None:
        existing = self.tables.payment_channels.get(channel_id)
        if existing is None:
            return None
        updated = dataclasses.replace(existing, **changes)
        self.tables.payment_channels[channel_id] = updated
        return updated

    def deactivate_all(self, except_id: int | None = None) -> int:
        count = 0
        for channel in list(self.tables.payment_channels.values()):
            if channel.is_active and channel.id != except_id:
                self.tables.payment_channels[channel.id] = dataclasses.replace(
                    channel, is_active=False
                )
                count += 1
        return count


class InMemoryAdminRepository(AdminRepository):

    def __init__(self, tables: _Tables):
        self.tables = tables

    def get_by_username(self, username: str) -> AdminCredential | None:
        for credential in self.tables.admins.values():
            if credential.identity.username == username:
                return credential
        return None

    def add(self, username: str, password_hash: bytes, name: str) -> AdminIdentity:
        if self.get_by_username(username) is not None:
            raise InvalidInputError(f"Admin user {username!r} already exists")
        identity = AdminIdentity(
            id=self.tables.next_id("admins"),
            username=username,
            name=name,
            created_at=_utc_now(),
        )
        self.tables.admins[identity.id] = AdminCredential(
            identity=identity,
            password_hash=password_hash,
        )
        return identity


class InMemoryUnitOfWork(UnitOfWork):

    def __init__(self, store: InMemoryStore):
        self._store = store
        self._snapshot: _Tables | None = None

    def _begin(self) -> None:
        self._store._lock.acquire()
        tables = self._store._tables
        self._snapshot = tables.clone()
        self.matches = InMemoryMatchRepository(tables)
        self.ticket_types = InMemoryTicketTypeRepository(tables)
        self.bookings = InMemoryBookingRepository(tables)
        self.payment_channels = InMemoryPaymentChannelRepository(tables)
        self.admins = InMemoryAdminRepository(tables)

    def _commit(self) -> None:
        self._snapshot = None

    def _rollback(self) -> None:
        if self._snapshot is not None:
            self._store._tables = self._snapshot
            self._snapshot = None

    def _close(self) -> None:
        self._store._lock.release()


class InMemoryStore(Store):

    def __init__(self):
        self._tables = _Tables()
        self._lock = threading.RLock()

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

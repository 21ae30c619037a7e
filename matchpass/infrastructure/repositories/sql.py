# matchpass/infrastructure/repositories/sql.py

"""SQLAlchemy store.

Each unit of work owns one Session and therefore one database transaction.
Seat counts are only ever changed with single conditional UPDATE statements,
never a read followed by a separate write.
"""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import case, delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

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
from matchpass.infrastructure.db.models import (
    AdminUserRow,
    BookingRow,
    MatchRow,
    PaymentChannelRow,
    TicketTypeRow,
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


# -----------------------------
# Row -> domain mapping
# -----------------------------
def _to_match(row: MatchRow) -> Match:
    return Match(
        id=row.id,
        team1=row.team1,
        team2=row.team2,
        team1_logo=row.team1_logo,
        team2_logo=row.team2_logo,
        venue=row.venue,
        stadium=row.stadium,
        date=row.date,
        time=row.time,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def _to_ticket_type(row: TicketTypeRow) -> TicketType:
    return TicketType(
        id=row.id,
        match_id=row.match_id,
        name=row.name,
        description=row.description,
        price=row.price,
        total_seats=row.total_seats,
        available_seats=row.available_seats,
        created_at=row.created_at,
    )


def _to_booking(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        booking_reference=row.booking_reference,
        match_id=row.match_id,
        ticket_type_id=row.ticket_type_id,
        full_name=row.full_name,
        email=row.email,
        phone=row.phone,
        quantity=row.quantity,
        base_amount=row.base_amount,
        gst=row.gst,
        service_fee=row.service_fee,
        total_amount=row.total_amount,
        status=row.status,
        payment_method=row.payment_method,
        utr_number=row.utr_number,
        created_at=row.created_at,
    )


def _to_payment_channel(row: PaymentChannelRow) -> PaymentChannel:
    return PaymentChannel(
        id=row.id,
        upi_id=row.upi_id,
        qr_code=row.qr_code,
        display_name=row.display_name,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def _to_admin_identity(row: AdminUserRow) -> AdminIdentity:
    return AdminIdentity(
        id=row.id,
        username=row.username,
        name=row.name,
        created_at=row.created_at,
    )


def _apply(row, changes: Mapping[str, Any]) -> None:
    for field, value in changes.items():
        setattr(row, field, value)


class SqlMatchRepository(MatchRepository):

    def __init__(self, db: Session):
        self.db = db

    def list_matches(self, active: bool | None = None) -> list[Match]:
        stmt = select(MatchRow).order_by(MatchRow.id)
        if active is not None:
            stmt = stmt.where(MatchRow.is_active == active)
        return [_to_match(row) for row in self.db.execute(stmt).scalars().all()]

    def get(self, match_id: int) -> Match | None:
        row = self.db.get(MatchRow, match_id)
        return _to_match(row) if row else None

    def add(self, match: NewMatch) -> Match:
        row = MatchRow(
            team1=match.team1,
            team2=match.team2,
            team1_logo=match.team1_logo,
            team2_logo=match.team2_logo,
            venue=match.venue,
            stadium=match.stadium,
            date=match.date,
            time=match.time,
            is_active=match.is_active,
        )
        self.db.add(row)
        self.db.flush()
        return _to_match(row)

    def update(self, match_id: int, changes: Mapping[str, Any]) -> Match | None:
        row = self.db.get(MatchRow, match_id)
        if not row:
            return None
        _apply(row, changes)
        self.db.flush()
        return _to_match(row)

    def delete(self, match_id: int) -> bool:
        result = self.db.execute(delete(MatchRow).where(MatchRow.id == match_id))
        return result.rowcount > 0


class SqlTicketTypeRepository(TicketTypeRepository):

    def __init__(self, db: Session):
        self.db = db

    def list_for_match(self, match_id: int) -> list[TicketType]:
        stmt = (
            select(TicketTypeRow)
            .where(TicketTypeRow.match_id == match_id)
            .order_by(TicketTypeRow.id)
        )
        return [_to_ticket_type(row) for row in self.db.execute(stmt).scalars().all()]

    def get(self, ticket_type_id: int) -> TicketType | None:
        row = self.db.get(TicketTypeRow, ticket_type_id, populate_existing=True)
        return _to_ticket_type(row) if row else None

    def exists_for_match(self, match_id: int) -> bool:
        stmt = select(exists().where(TicketTypeRow.match_id == match_id))
        return bool(self.db.execute(stmt).scalar())

    def name_taken(self, match_id: int, name: str, exclude_id: int | None = None) -> bool:
        criteria = [TicketTypeRow.match_id == match_id, TicketTypeRow.name == name]
        if exclude_id is not None:
            criteria.append(TicketTypeRow.id != exclude_id)
        return bool(self.db.execute(select(exists().where(*criteria))).scalar())

    def add(self, ticket_type: NewTicketType) -> TicketType:
        row = TicketTypeRow(
            match_id=ticket_type.match_id,
            name=ticket_type.name,
            description=ticket_type.description,
            price=ticket_type.price,
            total_seats=ticket_type.total_seats,
            available_seats=ticket_type.available_seats,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise InvalidInputError(
                f"Ticket type {ticket_type.name!r} already exists for match {ticket_type.match_id}"
            ) from exc
        return _to_ticket_type(row)

    def update(self, ticket_type_id: int, changes: Mapping[str, Any]) -> TicketType | None:
        row = self.db.get(TicketTypeRow, ticket_type_id)
        if not row:
            return None
        _apply(row, changes)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise InvalidInputError("Ticket type update violates a constraint") from exc
        return _to_ticket_type(row)

    def delete(self, ticket_type_id: int) -> bool:
        result = self.db.execute(
            delete(TicketTypeRow).where(TicketTypeRow.id == ticket_type_id)
        )
        return result.rowcount > 0

    def try_decrement_available(self, ticket_type_id: int, quantity: int) -> bool:
        """
        UPDATE ticket_types SET available_seats = available_seats - :q
        WHERE id = :id AND available_seats >= :q

        The row lock taken by the UPDATE is held until the unit of work
        ends, so concurrent reservations serialize on the row.
        """
        stmt = (
            update(TicketTypeRow)
            .where(TicketTypeRow.id == ticket_type_id)
            .where(TicketTypeRow.available_seats >= quantity)
            .values(available_seats=TicketTypeRow.available_seats - quantity)
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def resize_capacity(self, ticket_type_id: int, total_seats: int) -> bool:
        shifted = TicketTypeRow.available_seats + (total_seats - TicketTypeRow.total_seats)
        stmt = (
            update(TicketTypeRow)
            .where(TicketTypeRow.id == ticket_type_id)
            .where(shifted >= 0)
            .values(total_seats=total_seats, available_seats=shifted)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).rowcount == 1

    def increment_available(self, ticket_type_id: int, quantity: int) -> TicketType | None:
        raised = TicketTypeRow.available_seats + quantity
        stmt = (
            update(TicketTypeRow)
            .where(TicketTypeRow.id == ticket_type_id)
            .values(
                available_seats=case(
                    (raised > TicketTypeRow.total_seats, TicketTypeRow.total_seats),
                    else_=raised,
                )
            )
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            return None
        return self.get(ticket_type_id)


class SqlBookingRepository(BookingRepository):

    def __init__(self, db: Session):
        self.db = db

    def _row_by_reference(
        self, booking_reference: str, for_update: bool = False
    ) -> BookingRow | None:
        stmt = select(BookingRow).where(
            BookingRow.booking_reference == booking_reference
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_reference(self, booking_reference: str) -> Booking | None:
        row = self._row_by_reference(booking_reference)
        return _to_booking(row) if row else None

    def get_for_update(self, booking_reference: str) -> Booking | None:
        # SELECT ... FOR UPDATE; SQLite has no row locks and relies on BEGIN IMMEDIATE.
        row = self._row_by_reference(booking_reference, for_update=True)
        return _to_booking(row) if row else None

    def reference_exists(self, booking_reference: str) -> bool:
        stmt = select(exists().where(BookingRow.booking_reference == booking_reference))
        return bool(self.db.execute(stmt).scalar())

    def list_by_email(self, email: str) -> list[Booking]:
        stmt = (
            select(BookingRow)
            .where(BookingRow.email == email)
            .order_by(BookingRow.id.desc())
        )
        return [_to_booking(row) for row in self.db.execute(stmt).scalars().all()]

    def list_all(self) -> list[Booking]:
        stmt = select(BookingRow).order_by(BookingRow.id.desc())
        return [_to_booking(row) for row in self.db.execute(stmt).scalars().all()]

    def exists_for_ticket_type(self, ticket_type_id: int) -> bool:
        stmt = select(exists().where(BookingRow.ticket_type_id == ticket_type_id))
        return bool(self.db.execute(stmt).scalar())

    def add(self, booking: NewBooking) -> Booking:
        row = BookingRow(
            booking_reference=booking.booking_reference,
            match_id=booking.match_id,
            ticket_type_id=booking.ticket_type_id,
            full_name=booking.full_name,
            email=booking.email,
            phone=booking.phone,
            quantity=booking.quantity,
            base_amount=booking.base_amount,
            gst=booking.gst,
            service_fee=booking.service_fee,
            total_amount=booking.total_amount,
            status=booking.status,
        )
        self.db.add(row)
        self.db.flush()
        return _to_booking(row)

    def update(self, booking_reference: str, changes: Mapping[str, Any]) -> Booking | None:
        row = self._row_by_reference(booking_reference)
        if not row:
            return None
        _apply(row, changes)
        self.db.flush()
        return _to_booking(row)


class SqlPaymentChannelRepository(PaymentChannelRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, channel_id: int) -> PaymentChannel | None:
        row = self.db.get(PaymentChannelRow, channel_id)
        return _to_payment_channel(row) if row else None

    def get_active(self) -> PaymentChannel | None:
        stmt = select(PaymentChannelRow).where(PaymentChannelRow.is_active.is_(True))
        rows = list(self.db.execute(stmt).scalars().all())
        if len(rows) != 1:
            return None
        return _to_payment_channel(rows[0])

    def list_all(self) -> list[PaymentChannel]:
        stmt = select(PaymentChannelRow).order_by(PaymentChannelRow.id)
        return [_to_payment_channel(row) for row in self.db.execute(stmt).scalars().all()]

    def add(self, channel: NewPaymentChannel) -> PaymentChannel:
        row = PaymentChannelRow(
            upi_id=channel.upi_id,
            qr_code=channel.qr_code,
            display_name=channel.display_name,
            is_active=channel.is_active,
        )
        self.db.add(row)
        self.db.flush()
        return _to_payment_channel(row)

    def update(self, channel_id: int, changes: Mapping[str, Any]) -> PaymentChannel | None:
        row = self.db.get(PaymentChannelRow, channel_id)
        if not row:
            return None
        _apply(row, changes)
        self.db.flush()
        return _to_payment_channel(row)

    def deactivate_all(self, except_id: int | None = None) -> int:
        stmt = update(PaymentChannelRow).where(PaymentChannelRow.is_active.is_(True))
        if except_id is not None:
            stmt = stmt.where(PaymentChannelRow.id != except_id)
        stmt = stmt.values(is_active=False).execution_options(synchronize_session="fetch")
        return self.db.execute(stmt).rowcount


class SqlAdminRepository(AdminRepository):

    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> AdminCredential | None:
        stmt = select(AdminUserRow).where(AdminUserRow.username == username)
        row = self.db.execute(stmt).scalar_one_or_none()
        if not row:
            return None
        return AdminCredential(
            identity=_to_admin_identity(row),
            password_hash=row.password_hash,
        )

    def add(self, username: str, password_hash: bytes, name: str) -> AdminIdentity:
        row = AdminUserRow(username=username, password_hash=password_hash, name=name)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise InvalidInputError(f"Admin user {username!r} already exists") from exc
        return _to_admin_identity(row)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self.session: Session | None = None

    def _begin(self) -> None:
        self.session = self._session_factory()
        self.matches = SqlMatchRepository(self.session)
        self.ticket_types = SqlTicketTypeRepository(self.session)
        self.bookings = SqlBookingRepository(self.session)
        self.payment_channels = SqlPaymentChannelRepository(self.session)
        self.admins = SqlAdminRepository(self.session)

    def _commit(self) -> None:
        self.session.commit()

    def _rollback(self) -> None:
        self.session.rollback()

    def _close(self) -> None:
        self.session.close()


class SqlAlchemyStore(Store):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_factory)

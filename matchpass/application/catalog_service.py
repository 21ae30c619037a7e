import logging
from typing import Any, Mapping

from matchpass.domain.exceptions import InvalidInputError, NotFoundError
from matchpass.domain.limits import (
    SCHEDULE_MAX_LENGTH,
    TEAM_MAX_LENGTH,
    TICKET_NAME_MAX_LENGTH,
    VENUE_MAX_LENGTH,
    ensure_fits,
)
from matchpass.domain.models import (
    MATCH_PATCH_FIELDS,
    TICKET_TYPE_PATCH_FIELDS,
    Match,
    NewMatch,
    NewTicketType,
    TicketType,
)
from matchpass.infrastructure.repositories.interfaces import Store

logger = logging.getLogger(__name__)

# Required text fields and their column widths.
_REQUIRED_MATCH_TEXT = {
    "team1": TEAM_MAX_LENGTH,
    "team2": TEAM_MAX_LENGTH,
    "venue": VENUE_MAX_LENGTH,
    "stadium": VENUE_MAX_LENGTH,
    "date": SCHEDULE_MAX_LENGTH,
    "time": SCHEDULE_MAX_LENGTH,
}


class CatalogService:
    """Matches and their ticket types. Seat counts are left to the inventory engine."""

    def __init__(self, store: Store):
        self.store = store

    # -----------------------------
    # Matches
    # -----------------------------
    def list_matches(self, active_only: bool | None = None) -> list[Match]:
        """
        active_only=None lists everything; True/False filters on is_active.
        """
        with self.store.unit_of_work() as uow:
            return uow.matches.list_matches(active=active_only)

    def get_match(self, match_id: int) -> Match:
        with self.store.unit_of_work() as uow:
            match = uow.matches.get(match_id)
        if match is None:
            raise NotFoundError("Match", match_id)
        return match

    def create_match(self, match: NewMatch) -> Match:
        cleaned = {
            field: _required_text(getattr(match, field), field, max_length)
            for field, max_length in _REQUIRED_MATCH_TEXT.items()
        }
        if not isinstance(match.is_active, bool):
            raise InvalidInputError("is_active must be a boolean")

        with self.store.unit_of_work() as uow:
            created = uow.matches.add(
                NewMatch(
                    team1_logo=match.team1_logo,
                    team2_logo=match.team2_logo,
                    is_active=match.is_active,
                    **cleaned,
                )
            )

        logger.info("Match created. id=%s %s vs %s", created.id, created.team1, created.team2)
        return created

    def update_match(self, match_id: int, patch: Mapping[str, Any]) -> Match:
        """
        Once a match has ticket types, only is_active may change.
        """
        changes = _match_changes(patch)

        with self.store.unit_of_work() as uow:
            if uow.matches.get(match_id) is None:
                raise NotFoundError("Match", match_id)
            if set(changes) - {"is_active"} and uow.ticket_types.exists_for_match(match_id):
                raise InvalidInputError(
                    f"Match {match_id} has ticket types; only is_active can change"
                )
            updated = uow.matches.update(match_id, changes)

        logger.info("Match updated. id=%s fields=%s", match_id, sorted(changes))
        return updated

    def delete_match(self, match_id: int) -> bool:
        with self.store.unit_of_work() as uow:
            if uow.matches.get(match_id) is None:
                raise NotFoundError("Match", match_id)
            if uow.ticket_types.exists_for_match(match_id):
                raise InvalidInputError(f"Match {match_id} still has ticket types")
            deleted = uow.matches.delete(match_id)

        logger.info("Match deleted. id=%s", match_id)
        return deleted

    # -----------------------------
    # Ticket types
    # -----------------------------
    def list_ticket_types(self, match_id: int) -> list[TicketType]:
        """Unknown matches simply have no ticket types."""
        with self.store.unit_of_work() as uow:
            return uow.ticket_types.list_for_match(match_id)

    def get_ticket_type(self, ticket_type_id: int) -> TicketType:
        with self.store.unit_of_work() as uow:
            ticket_type = uow.ticket_types.get(ticket_type_id)
        if ticket_type is None:
            raise NotFoundError("Ticket type", ticket_type_id)
        return ticket_type

    def create_ticket_type(self, ticket_type: NewTicketType) -> TicketType:
        name = _required_text(ticket_type.name, "name", TICKET_NAME_MAX_LENGTH)
        price = _non_negative_int(ticket_type.price, "price")
        total_seats = _non_negative_int(ticket_type.total_seats, "total_seats")
        available_seats = total_seats
        if ticket_type.available_seats is not None:
            available_seats = _non_negative_int(ticket_type.available_seats, "available_seats")
            if available_seats > total_seats:
                raise InvalidInputError("available_seats cannot exceed total_seats")

        with self.store.unit_of_work() as uow:
            if uow.matches.get(ticket_type.match_id) is None:
                raise NotFoundError("Match", ticket_type.match_id)
            if uow.ticket_types.name_taken(ticket_type.match_id, name):
                raise InvalidInputError(
                    f"Ticket type {name!r} already exists for match {ticket_type.match_id}"
                )
            created = uow.ticket_types.add(
                NewTicketType(
                    match_id=ticket_type.match_id,
                    name=name,
                    description=ticket_type.description,
                    price=price,
                    total_seats=total_seats,
                    available_seats=available_seats,
                )
            )

        logger.info(
            "Ticket type created. id=%s match_id=%s seats=%s",
            created.id,
            created.match_id,
            created.total_seats,
        )
        return created

    def update_ticket_type(self, ticket_type_id: int, patch: Mapping[str, Any]) -> TicketType:
        """
        available_seats is not patchable. A new total_seats moves
        available_seats by the same amount, atomically.
        """
        changes = _ticket_type_changes(patch)
        total_seats = changes.pop("total_seats", None)

        with self.store.unit_of_work() as uow:
            existing = uow.ticket_types.get(ticket_type_id)
            if existing is None:
                raise NotFoundError("Ticket type", ticket_type_id)
            if "name" in changes and uow.ticket_types.name_taken(
                existing.match_id, changes["name"], exclude_id=ticket_type_id
            ):
                raise InvalidInputError(
                    f"Ticket type {changes['name']!r} already exists for match {existing.match_id}"
                )

            if total_seats is not None and not uow.ticket_types.resize_capacity(
                ticket_type_id, total_seats
            ):
                raise InvalidInputError(
                    "total_seats cannot drop below the number of seats already sold"
                )
            updated = uow.ticket_types.update(ticket_type_id, changes)

        logger.info("Ticket type updated. id=%s", ticket_type_id)
        return updated

    def delete_ticket_type(self, ticket_type_id: int) -> bool:
        with self.store.unit_of_work() as uow:
            if uow.ticket_types.get(ticket_type_id) is None:
                raise NotFoundError("Ticket type", ticket_type_id)
            if uow.bookings.exists_for_ticket_type(ticket_type_id):
                raise InvalidInputError(f"Ticket type {ticket_type_id} has bookings")
            deleted = uow.ticket_types.delete(ticket_type_id)

        logger.info("Ticket type deleted. id=%s", ticket_type_id)
        return deleted


def _required_text(value: Any, field: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} is required")
    value = value.strip()
    ensure_fits(value, max_length, field)
    return value


def _non_negative_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(f"{field} must be a non-negative integer")
    return value


def _match_changes(patch: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(patch) - MATCH_PATCH_FIELDS
    if unknown:
        raise InvalidInputError(f"Unknown match fields: {', '.join(sorted(unknown))}")

    changes = dict(patch)
    for field, max_length in _REQUIRED_MATCH_TEXT.items():
        if field in changes:
            changes[field] = _required_text(changes[field], field, max_length)
    if "is_active" in changes and not isinstance(changes["is_active"], bool):
        raise InvalidInputError("is_active must be a boolean")
    return changes


def _ticket_type_changes(patch: Mapping[str, Any]) -> dict[str, Any]:
    if "available_seats" in patch:
        raise InvalidInputError(
            "available_seats changes only through reservations or restock"
        )
    unknown = set(patch) - TICKET_TYPE_PATCH_FIELDS
    if unknown:
        raise InvalidInputError(f"Unknown ticket type fields: {', '.join(sorted(unknown))}")

    changes = dict(patch)
    if "name" in changes:
        changes["name"] = _required_text(changes["name"], "name", TICKET_NAME_MAX_LENGTH)
    for field in ("price", "total_seats"):
        if field in changes:
            changes[field] = _non_negative_int(changes[field], field)
    return changes

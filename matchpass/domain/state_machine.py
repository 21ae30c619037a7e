# matchpass/domain/state_machine.py

from enum import Enum
from typing import Dict, Set

from matchpass.domain.exceptions import InvalidStateTransitionError, InvalidStatusError


class BookingStatus(str, Enum):
    PENDING = "pending"
    PAYMENT_PENDING = "payment_pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses an admin may set directly. payment_pending is only
# entered by attaching payment proof.
ADMIN_SETTABLE_STATUSES: Set[BookingStatus] = {
    BookingStatus.PENDING,
    BookingStatus.APPROVED,
    BookingStatus.REJECTED,
}


class BookingStateMachine:
    """
    Central lifecycle controller for booking transitions.
    Defines the legal state transitions.
    """

    _ALLOWED_TRANSITIONS: Dict[BookingStatus, Set[BookingStatus]] = {
        BookingStatus.PENDING: {
            BookingStatus.PAYMENT_PENDING,
            BookingStatus.APPROVED,
            BookingStatus.REJECTED,
        },
        BookingStatus.PAYMENT_PENDING: {
            BookingStatus.PENDING,
            BookingStatus.APPROVED,
            BookingStatus.REJECTED,
        },
        BookingStatus.APPROVED: set(),
        BookingStatus.REJECTED: set(),
    }

    @classmethod
    def can_transition(
        cls,
        from_status: BookingStatus,
        to_status: BookingStatus,
    ) -> bool:
        """
        Returns True if transition is allowed.
        """
        cls._ensure_valid_status(from_status)
        cls._ensure_valid_status(to_status)

        return to_status in cls._ALLOWED_TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(
        cls,
        from_status: BookingStatus,
        to_status: BookingStatus,
    ) -> None:
        """
        Raises InvalidStateTransitionError if transition is illegal.
        """
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(
                from_state=from_status.value,
                to_state=to_status.value,
            )

    @classmethod
    def is_terminal(cls, status: BookingStatus) -> bool:
        """
        Returns True if the state is terminal (no further transitions allowed).
        """
        cls._ensure_valid_status(status)
        return len(cls._ALLOWED_TRANSITIONS.get(status, set())) == 0

    @staticmethod
    def parse_admin_status(value: str) -> BookingStatus:
        """
        Turns a raw status string from an admin command into a BookingStatus.
        Raises InvalidStatusError for anything an admin may not set.
        """
        try:
            status = BookingStatus(value)
        except ValueError as exc:
            raise InvalidStatusError(f"Unknown booking status: {value!r}") from exc

        if status not in ADMIN_SETTABLE_STATUSES:
            raise InvalidStatusError(
                f"Status {status.value!r} cannot be set by an admin"
            )
        return status

    @staticmethod
    def _ensure_valid_status(status: BookingStatus) -> None:
        if not isinstance(status, BookingStatus):
            raise TypeError(
                f"Expected BookingStatus, got {type(status)}"
            )

class MatchPassError(Exception):
    """
    Base exception for all domain-level errors
    inside MatchPass.
    """


class InvalidInputError(MatchPassError):
    """Raised when a command carries missing or malformed fields."""


class NotFoundError(MatchPassError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class InsufficientInventoryError(MatchPassError):
    """Raised when a ticket type has fewer seats left than requested."""

    def __init__(self, ticket_type_id: int, requested: int, available: int):
        self.ticket_type_id = ticket_type_id
        self.requested = requested
        self.available = available

        message = (
            f"Not enough seats available: requested {requested}, "
            f"{available} left"
        )
        super().__init__(message)


class InvalidStatusError(MatchPassError):
    """Raised when a booking status outside the allowed set is requested."""


class InvalidStateTransitionError(InvalidStatusError):
    """
    Raised when an illegal booking state transition is attempted.
    """

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal state transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)

# matchpass/domain/limits.py

from matchpass.domain.exceptions import InvalidInputError

# Column widths. The tables, the request models and the services all read these.
TEAM_MAX_LENGTH = 128
VENUE_MAX_LENGTH = 255
SCHEDULE_MAX_LENGTH = 64
TICKET_NAME_MAX_LENGTH = 128
CUSTOMER_NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 32
PAYMENT_METHOD_MAX_LENGTH = 32
UTR_MAX_LENGTH = 64
BOOKING_REFERENCE_MAX_LENGTH = 64
UPI_ID_MAX_LENGTH = 128
DISPLAY_NAME_MAX_LENGTH = 128
USERNAME_MAX_LENGTH = 64
ADMIN_NAME_MAX_LENGTH = 128


def ensure_fits(value: str | None, max_length: int, field: str) -> None:
    """Raises InvalidInputError if value would not fit its column."""
    if value is not None and len(value) > max_length:
        raise InvalidInputError(f"{field} cannot exceed {max_length} characters")

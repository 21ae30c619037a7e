from fastapi import Request, status
from fastapi.responses import JSONResponse

from matchpass.domain.exceptions import (
    InsufficientInventoryError,
    InvalidInputError,
    InvalidStateTransitionError,
    InvalidStatusError,
    NotFoundError,
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, exc)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, exc)


async def insufficient_inventory_handler(
    request: Request, exc: InsufficientInventoryError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "ticket_type_id": exc.ticket_type_id,
            "requested": exc.requested,
            "available": exc.available,
        },
    )


async def invalid_status_handler(request: Request, exc: InvalidStatusError) -> JSONResponse:
    if isinstance(exc, InvalidStateTransitionError):
        return _error(status.HTTP_409_CONFLICT, exc)
    return _error(status.HTTP_400_BAD_REQUEST, exc)


EXCEPTION_HANDLERS = {
    InvalidInputError: invalid_input_handler,
    NotFoundError: not_found_handler,
    InsufficientInventoryError: insufficient_inventory_handler,
    InvalidStatusError: invalid_status_handler,
}


def register_exception_handlers(app) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)

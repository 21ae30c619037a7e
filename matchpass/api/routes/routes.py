from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from matchpass.api.schemas.schemas import (
    AdminResponse,
    BookingRequest,
    BookingResponse,
    BookingStatusRequest,
    LoginRequest,
    MatchCreate,
    MatchResponse,
    MatchUpdate,
    PaymentChannelCreate,
    PaymentChannelResponse,
    PaymentChannelUpdate,
    PaymentRequest,
    RestockRequest,
    TicketTypeCreate,
    TicketTypeResponse,
    TicketTypeUpdate,
)
from matchpass.application.container import Services
from matchpass.domain.models import (
    CreateBookingCommand,
    CustomerDetails,
    NewMatch,
    NewPaymentChannel,
    NewTicketType,
)


router = APIRouter()


def get_services(request: Request) -> Services:
    return request.app.state.services


@router.get("/health")
def health():
    return {"message": "MatchPass is running"}


# -----------------------------
# Catalog
# -----------------------------
@router.get("/api/matches", response_model=list[MatchResponse])
def list_matches(
    active: bool | None = None,
    services: Services = Depends(get_services),
):
    return services.catalog.list_matches(active_only=active)


@router.get("/api/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, services: Services = Depends(get_services)):
    return services.catalog.get_match(match_id)


@router.get("/api/matches/{match_id}/tickets", response_model=list[TicketTypeResponse])
def list_ticket_types(match_id: int, services: Services = Depends(get_services)):
    return services.catalog.list_ticket_types(match_id)


@router.get("/api/ticket-types/{ticket_type_id}", response_model=TicketTypeResponse)
def get_ticket_type(ticket_type_id: int, services: Services = Depends(get_services)):
    return services.catalog.get_ticket_type(ticket_type_id)


# -----------------------------
# Bookings
# -----------------------------
@router.post(
    "/api/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_booking(request: BookingRequest, services: Services = Depends(get_services)):
    return services.bookings.create_booking(
        CreateBookingCommand(
            match_id=request.match_id,
            ticket_type_id=request.ticket_type_id,
            customer=CustomerDetails(
                full_name=request.full_name,
                email=request.email,
                phone=request.phone,
            ),
            quantity=request.quantity,
        )
    )


@router.patch("/api/bookings/{booking_reference}/payment", response_model=BookingResponse)
def attach_payment(
    booking_reference: str,
    request: PaymentRequest,
    services: Services = Depends(get_services),
):
    return services.bookings.attach_payment(
        booking_reference,
        request.payment_method,
        request.utr_number,
    )


@router.get("/api/bookings", response_model=list[BookingResponse])
def list_bookings_by_email(
    email: str = Query(min_length=1),
    services: Services = Depends(get_services),
):
    return services.bookings.list_by_email(email)


@router.get("/api/bookings/{booking_reference}", response_model=BookingResponse)
def get_booking(booking_reference: str, services: Services = Depends(get_services)):
    return services.bookings.get_booking(booking_reference)


@router.get("/api/upi-details", response_model=PaymentChannelResponse)
def get_active_payment_channel(services: Services = Depends(get_services)):
    channel = services.payment_channels.get_active()
    if channel is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active UPI details found",
        )
    return channel


# -----------------------------
# Admin
# -----------------------------
@router.post("/api/admin/login", response_model=AdminResponse)
def admin_login(request: LoginRequest, services: Services = Depends(get_services)):
    identity = services.credentials.verify(request.username, request.password)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return identity


@router.post(
    "/api/admin/matches",
    response_model=MatchResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_match(request: MatchCreate, services: Services = Depends(get_services)):
    return services.catalog.create_match(NewMatch(**request.model_dump()))


@router.patch("/api/admin/matches/{match_id}", response_model=MatchResponse)
def update_match(
    match_id: int,
    request: MatchUpdate,
    services: Services = Depends(get_services),
):
    return services.catalog.update_match(match_id, request.model_dump(exclude_unset=True))


@router.delete("/api/admin/matches/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_match(match_id: int, services: Services = Depends(get_services)):
    services.catalog.delete_match(match_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/api/admin/ticket-types",
    response_model=TicketTypeResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_ticket_type(request: TicketTypeCreate, services: Services = Depends(get_services)):
    return services.catalog.create_ticket_type(NewTicketType(**request.model_dump()))


@router.patch("/api/admin/ticket-types/{ticket_type_id}", response_model=TicketTypeResponse)
def update_ticket_type(
    ticket_type_id: int,
    request: TicketTypeUpdate,
    services: Services = Depends(get_services),
):
    return services.catalog.update_ticket_type(
        ticket_type_id,
        request.model_dump(exclude_unset=True),
    )


@router.delete(
    "/api/admin/ticket-types/{ticket_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_ticket_type(ticket_type_id: int, services: Services = Depends(get_services)):
    services.catalog.delete_ticket_type(ticket_type_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/api/admin/ticket-types/{ticket_type_id}/restock",
    response_model=TicketTypeResponse,
)
def restock_ticket_type(
    ticket_type_id: int,
    request: RestockRequest,
    services: Services = Depends(get_services),
):
    return services.inventory.restock(ticket_type_id, request.quantity)


@router.get("/api/admin/bookings", response_model=list[BookingResponse])
def list_all_bookings(services: Services = Depends(get_services)):
    return services.bookings.list_bookings()


@router.patch("/api/admin/bookings/{booking_reference}/status", response_model=BookingResponse)
def set_booking_status(
    booking_reference: str,
    request: BookingStatusRequest,
    services: Services = Depends(get_services),
):
    return services.bookings.set_status(booking_reference, request.status)


@router.get("/api/admin/upi-details", response_model=list[PaymentChannelResponse])
def list_payment_channels(services: Services = Depends(get_services)):
    return services.payment_channels.list_channels()


@router.post(
    "/api/admin/upi-details",
    response_model=PaymentChannelResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_payment_channel(
    request: PaymentChannelCreate,
    services: Services = Depends(get_services),
):
    return services.payment_channels.create(NewPaymentChannel(**request.model_dump()))


@router.patch("/api/admin/upi-details/{channel_id}", response_model=PaymentChannelResponse)
def update_payment_channel(
    channel_id: int,
    request: PaymentChannelUpdate,
    services: Services = Depends(get_services),
):
    return services.payment_channels.update(
        channel_id,
        request.model_dump(exclude_unset=True),
    )

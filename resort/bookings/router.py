from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from resort.auth.dependencies import get_current_user
from resort.bookings.booking_service import BookingService, DEFAULT_PAGE_SIZE
from resort.bookings.schemas import (
    BookingCreate, BookingCreateResponse, BookingVerificationResponse,
    DateOccupancy, DateOccupancyEntry, PaginatedBookings
)
from resort.bookings.ticket_service import TicketService
from resort.bookings.token_codec import BookingTokenCodec, get_token_codec
from resort.database import get_db
from resort.models import User

router = APIRouter()

@router.post("", response_model=BookingCreateResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new booking"""

    booking_service = BookingService(db)
    booking = booking_service.create_booking(current_user.id, request)

    return BookingCreateResponse(message="Booking created successfully", booking=booking)

@router.get("/me", response_model=PaginatedBookings)
def get_user_bookings(
    page: int = Query(1, ge=1, description="Page number"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's bookings, newest first"""

    booking_service = BookingService(db)
    bookings, total = booking_service.get_user_bookings(current_user.id, page=page)

    if not bookings:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No bookings found for this user"
        )

    return PaginatedBookings(
        current_page=page,
        total_pages=BookingService.total_pages(total, DEFAULT_PAGE_SIZE),
        total_bookings=total,
        results=len(bookings),
        data=bookings
    )

@router.get("/date", response_model=DateOccupancy)
def get_bookings_by_date(
    day: date = Query(..., alias="date", description="Day to check (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    """Occupancy for a day: stays covering it, without guest details"""

    booking_service = BookingService(db)
    bookings = booking_service.get_bookings_on_date(day)

    return DateOccupancy(
        day=day,
        total_bookings=len(bookings),
        total_guests=sum(b.number_of_person for b in bookings),
        bookings=[
            DateOccupancyEntry(
                booking_id=b.id,
                check_in_date=b.check_in_date,
                check_out_date=b.check_out_date,
                number_of_person=b.number_of_person
            )
            for b in bookings
        ]
    )

@router.get("/verify", response_model=BookingVerificationResponse)
def verify_booking(
    token: str = Query(..., min_length=1, description="Token from the ticket QR code"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    codec: BookingTokenCodec = Depends(get_token_codec)
):
    """Redeem a ticket token at check-in; succeeds once per booking"""

    ticket_service = TicketService(db, codec)
    booking = ticket_service.redeem(token)

    return BookingVerificationResponse(message="Booking verified successfully", booking=booking)

@router.get("/{booking_id}/ticket")
def get_booking_ticket_pdf(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    codec: BookingTokenCodec = Depends(get_token_codec)
):
    """Generate the printable PDF ticket with its verification QR code (owner or admin)"""

    ticket_service = TicketService(db, codec)
    ticket = ticket_service.issue_ticket(booking_id, requested_by=current_user)

    return Response(
        content=ticket.content,
        media_type=ticket.media_type,
        headers={"Content-Disposition": ticket.content_disposition}
    )

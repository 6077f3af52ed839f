"""
Booking & Ticketing Module

This module covers the booking-ticket lifecycle of the resort:

- Booking creation and listing
- Verification token signing and checking
- PDF ticket generation with a QR code pointing at the verification URL
- One-time ticket redemption at check-in

Key Components:
- booking_service.py: Booking creation, listing, search and export
- token_codec.py: Signed, time-bounded booking verification tokens
- ticket_service.py: Ticket issuance (PDF + QR) and redemption
- router.py: FastAPI endpoints for bookings and tickets
- schemas.py: Pydantic models for booking data
"""

from .router import router
from .booking_service import BookingService
from .ticket_service import TicketService, IssuedTicket
from .token_codec import BookingTokenCodec, BookingClaims

__all__ = [
    "router",
    "BookingService",
    "TicketService",
    "IssuedTicket",
    "BookingTokenCodec",
    "BookingClaims"
]

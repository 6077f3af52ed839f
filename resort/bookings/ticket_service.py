import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Optional

import qrcode
from qrcode import constants
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resort.bookings.token_codec import BookingClaims, BookingTokenCodec
from resort.config import settings
from resort.exceptions import BookingError, ErrorKind, VerificationError
from resort.models import Booking, User, utcnow

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M"
INVALID_BOOKING_MESSAGE = "Invalid or fake booking"


@dataclass
class IssuedTicket:
    """A rendered ticket document and the token it carries"""
    booking_id: int
    token: str
    verification_url: str
    content: bytes
    media_type: str = "application/pdf"

    @property
    def filename(self) -> str:
        return f"booking-{self.booking_id}.pdf"

    @property
    def content_disposition(self) -> str:
        return f"inline; filename={self.filename}"


class TicketService:
    """Issues printable booking tickets and redeems their QR tokens"""

    def __init__(
        self,
        db: Session,
        codec: BookingTokenCodec,
        client_url: str = None,
        resort_name: str = None,
    ):
        self.db = db
        self.codec = codec
        self.client_url = (client_url or settings.CLIENT_URL).rstrip("/")
        self.resort_name = resort_name or settings.RESORT_NAME

    def build_verification_url(self, token: str) -> str:
        return f"{self.client_url}/verify-booking/{token}"

    def issue_ticket(self, booking_id: int, requested_by: Optional[User] = None) -> IssuedTicket:
        """Mint a verification token for a booking and render its PDF ticket.

        When ``requested_by`` is given, only the booking owner or an admin gets
        the ticket; anyone else is told the booking does not exist.
        """

        booking = self._get_booking(booking_id)
        if not booking:
            raise BookingError(ErrorKind.NOT_FOUND, "Booking not found")
        if requested_by is not None and not requested_by.is_admin and booking.user_id != requested_by.id:
            logger.warning("User %s asked for the ticket of booking %s they do not own", requested_by.id, booking.id)
            raise BookingError(ErrorKind.NOT_FOUND, "Booking not found")

        token = self.codec.issue(BookingClaims(booking_id=booking.id, email=booking.email))
        verification_url = self.build_verification_url(token)

        try:
            content = self.render_ticket_pdf(booking, verification_url)
        except Exception:
            logger.exception("Failed to render ticket for booking %s", booking.id)
            raise BookingError(ErrorKind.RENDER_FAILURE)

        logger.info("Issued ticket for booking %s", booking.id)
        return IssuedTicket(
            booking_id=booking.id,
            token=token,
            verification_url=verification_url,
            content=content,
        )

    def redeem(self, token: str) -> Booking:
        """Verify a scanned token and mark its booking verified, exactly once"""

        try:
            claims = self.codec.verify(token)
        except VerificationError as e:
            # The sub-case stays in the server log; callers only see INVALID_TOKEN
            logger.info("Rejected booking token: %s", e.kind.value)
            raise BookingError(ErrorKind.INVALID_TOKEN)

        booking = self._get_booking(claims.booking_id)
        if not booking or booking.email != claims.email:
            logger.warning("Booking token did not match a booking (id=%s)", claims.booking_id)
            raise BookingError(ErrorKind.NOT_FOUND, INVALID_BOOKING_MESSAGE)

        if booking.is_verified:
            raise BookingError(ErrorKind.ALREADY_REDEEMED)

        # Check-and-flip in one statement so concurrent scans cannot both win
        try:
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == booking.id, Booking.is_verified.is_(False))
                .values(is_verified=True, verified_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.db.rollback()
                raise BookingError(ErrorKind.ALREADY_REDEEMED)
            self.db.commit()
            self.db.refresh(booking)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Store failure while redeeming booking %s", booking.id)
            raise BookingError(ErrorKind.STORE_UNAVAILABLE)

        logger.info("Booking %s verified", booking.id)
        return booking

    def generate_qr_code_image(self, data: str, size: int = 300) -> bytes:
        """Encode ``data`` as a PNG QR code"""

        qr = qrcode.QRCode(
            version=1,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white")
        qr_image = qr_image.resize((size, size))

        output = BytesIO()
        qr_image.save(output, format="PNG")
        return output.getvalue()

    def render_ticket_pdf(self, booking: Booking, verification_url: str) -> bytes:
        """Render the printable ticket with booking details and the QR code"""

        output = BytesIO()
        doc = SimpleDocTemplate(output, pagesize=A4, title=f"Booking #{booking.id}")
        styles = getSampleStyleSheet()
        story = []

        # Title
        story.append(Paragraph(f"{self.resort_name} - Booking Ticket", styles['Title']))
        story.append(Spacer(1, 20))

        booking_info = [
            ["Guest Name:", booking.guest_name],
            ["Email:", booking.email],
            ["Phone:", booking.phone],
            ["Check-In:", self._format_datetime(booking.check_in_date)],
            ["Check-Out:", self._format_datetime(booking.check_out_date)],
            ["Guests:", str(booking.number_of_person)],
            ["Status:", booking.status],
        ]

        booking_table = Table(booking_info, colWidths=[100, 300])
        booking_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), colors.lightgrey),
            ('TEXTCOLOR', (0, 0), (-1, -1), colors.black),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 11),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))

        story.append(booking_table)
        story.append(Spacer(1, 30))

        qr_png = self.generate_qr_code_image(verification_url)
        story.append(Image(BytesIO(qr_png), width=150, height=150))
        story.append(Spacer(1, 10))
        story.append(Paragraph("Scan this QR at check-in to verify your booking", styles['Italic']))

        doc.build(story)
        return output.getvalue()

    def _get_booking(self, booking_id: int) -> Optional[Booking]:
        try:
            return self.db.get(Booking, booking_id)
        except SQLAlchemyError:
            logger.exception("Store failure while loading booking %s", booking_id)
            raise BookingError(ErrorKind.STORE_UNAVAILABLE)

    @staticmethod
    def _format_datetime(value: Optional[datetime]) -> str:
        return value.strftime(DATETIME_FORMAT) if value else "-"

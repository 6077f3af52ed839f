import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from resort.bookings.schemas import BookingCreate, BookingSearchFilters
from resort.exceptions import BookingError, ErrorKind
from resort.models import Booking, BookingStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

EXPORT_COLUMNS = [
    "id", "guest_name", "email", "phone", "check_in_date", "check_out_date",
    "number_of_person", "status", "is_verified", "verified_at", "booked_by", "created_at",
]


class BookingService:
    """Service for creating and querying resort bookings"""

    def __init__(self, db: Session):
        self.db = db

    def create_booking(self, user_id: int, request: BookingCreate) -> Booking:
        """Create a new booking for an authenticated user"""

        booking = Booking(
            user_id=user_id,
            guest_name=request.guest_name,
            email=request.email,
            phone=request.phone,
            check_in_date=self._naive(request.check_in_date),
            check_out_date=self._naive(request.check_out_date),
            number_of_person=request.number_of_person,
            status=BookingStatus.SUCCESS.value,
            is_verified=False,
        )

        try:
            self.db.add(booking)
            self.db.commit()
            self.db.refresh(booking)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Store failure while creating booking for user %s", user_id)
            raise BookingError(ErrorKind.STORE_UNAVAILABLE)

        logger.info("Booking %s created by user %s", booking.id, user_id)
        return booking

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        """Get booking by ID, with its owner loaded"""
        return (
            self.db.query(Booking)
            .options(joinedload(Booking.user))
            .filter(Booking.id == booking_id)
            .first()
        )

    def get_user_bookings(
        self,
        user_id: int,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[List[Booking], int]:
        """Get a page of a user's bookings, newest first, plus the total count"""

        query = self.db.query(Booking).filter(Booking.user_id == user_id)
        return self._paginate(query, page, page_size)

    def search_bookings(
        self,
        filters: BookingSearchFilters,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[List[Booking], int]:
        """Search all bookings with admin filters"""

        query = self._filtered_query(filters)
        return self._paginate(query, page, page_size, joinedload(Booking.user))

    def export_bookings(self, filters: BookingSearchFilters) -> List[Dict[str, Any]]:
        """Flatten every booking matching ``filters`` into export rows"""

        bookings = (
            self._filtered_query(filters)
            .options(joinedload(Booking.user))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

        rows = []
        for booking in bookings:
            rows.append({
                "id": booking.id,
                "guest_name": booking.guest_name,
                "email": booking.email,
                "phone": booking.phone,
                "check_in_date": booking.check_in_date.isoformat() if booking.check_in_date else None,
                "check_out_date": booking.check_out_date.isoformat() if booking.check_out_date else None,
                "number_of_person": booking.number_of_person,
                "status": booking.status,
                "is_verified": booking.is_verified,
                "verified_at": booking.verified_at.isoformat() if booking.verified_at else None,
                "booked_by": booking.user.email if booking.user else None,
                "created_at": booking.created_at.isoformat() if booking.created_at else None,
            })
        return rows

    def get_bookings_on_date(self, day: date) -> List[Booking]:
        """Bookings whose stay covers ``day``"""

        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)

        return (
            self.db.query(Booking)
            .filter(Booking.check_in_date < day_end, Booking.check_out_date >= day_start)
            .order_by(Booking.check_in_date)
            .all()
        )

    @staticmethod
    def total_pages(total: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
        return math.ceil(total / page_size) if total else 0

    def _filtered_query(self, filters: BookingSearchFilters) -> Query:
        query = self.db.query(Booking)

        if filters.status:
            query = query.filter(Booking.status == filters.status)

        if filters.is_verified is not None:
            query = query.filter(Booking.is_verified.is_(filters.is_verified))

        if filters.check_in_from:
            query = query.filter(Booking.check_in_date >= datetime.combine(filters.check_in_from, time.min))

        if filters.check_in_to:
            query = query.filter(
                Booking.check_in_date < datetime.combine(filters.check_in_to, time.min) + timedelta(days=1)
            )

        if filters.user_id:
            query = query.filter(Booking.user_id == filters.user_id)

        if filters.search:
            search_pattern = f"%{filters.search}%"
            query = query.filter(
                or_(
                    Booking.guest_name.ilike(search_pattern),
                    Booking.email.ilike(search_pattern),
                    Booking.phone.ilike(search_pattern)
                )
            )

        return query

    def _paginate(self, query: Query, page: int, page_size: int, *options) -> Tuple[List[Booking], int]:
        total = query.count()
        bookings = (
            query.options(*options)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return bookings, total

    @staticmethod
    def _naive(value: datetime) -> datetime:
        """Normalise aware datetimes to naive UTC before storing"""
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

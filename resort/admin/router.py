import io
from datetime import date
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from resort.auth.dependencies import require_admin
from resort.bookings.booking_service import BookingService, EXPORT_COLUMNS
from resort.bookings.schemas import AdminBooking, BookingSearchFilters, PaginatedAdminBookings
from resort.database import get_db
from resort.models import User

router = APIRouter()

def get_booking_filters(
    booking_status: Optional[str] = Query(None, alias="status", description="Filter by booking status"),
    is_verified: Optional[bool] = Query(None, description="Filter by check-in verification"),
    check_in_from: Optional[date] = Query(None, description="Check-in on or after this date"),
    check_in_to: Optional[date] = Query(None, description="Check-in on or before this date"),
    user_id: Optional[int] = Query(None, description="Filter by booking owner"),
    search: Optional[str] = Query(None, description="Search guest name, email or phone"),
) -> BookingSearchFilters:
    return BookingSearchFilters(
        status=booking_status,
        is_verified=is_verified,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
        user_id=user_id,
        search=search
    )

@router.get("/bookings", response_model=PaginatedAdminBookings)
def get_all_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    filters: BookingSearchFilters = Depends(get_booking_filters),
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all bookings with filters, newest first"""

    booking_service = BookingService(db)
    bookings, total = booking_service.search_bookings(filters, page=page, page_size=page_size)

    return PaginatedAdminBookings(
        current_page=page,
        total_pages=BookingService.total_pages(total, page_size),
        total_bookings=total,
        results=len(bookings),
        data=bookings
    )

@router.get("/bookings/export")
def export_bookings(
    format: str = Query("csv", pattern="^(csv|excel)$"),
    filters: BookingSearchFilters = Depends(get_booking_filters),
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Export filtered bookings to CSV/Excel"""

    booking_service = BookingService(db)
    df = pd.DataFrame(booking_service.export_bookings(filters), columns=EXPORT_COLUMNS)

    if format == "csv":
        output = io.StringIO()
        df.to_csv(output, index=False)
        return StreamingResponse(
            io.BytesIO(output.getvalue().encode()),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=bookings.csv"}
        )
    else:  # excel
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Bookings', index=False)
        output.seek(0)
        return StreamingResponse(
            output,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": "attachment; filename=bookings.xlsx"}
        )

@router.get("/bookings/{booking_id}", response_model=AdminBooking)
def get_booking(
    booking_id: int,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get booking details with its owner"""

    booking = BookingService(db).get_booking(booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found"
        )
    return booking

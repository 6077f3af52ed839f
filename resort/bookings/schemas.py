from pydantic import BaseModel, EmailStr, Field, validator
from typing import List, Optional
from datetime import datetime, date

# Booking Models
class BookingCreate(BaseModel):
    """Booking creation request"""
    guest_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    check_in_date: datetime
    check_out_date: datetime
    number_of_person: int = Field(..., gt=0, description="Party size")

    @validator('guest_name', 'phone')
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be blank')
        return v.strip()

class Booking(BaseModel):
    """Booking record"""
    id: int
    user_id: int
    guest_name: str
    email: str
    phone: str
    check_in_date: datetime
    check_out_date: datetime
    number_of_person: int
    status: str
    is_verified: bool
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BookingOwner(BaseModel):
    """Owner summary attached to admin booking views"""
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True

class AdminBooking(Booking):
    """Booking record with its owner"""
    user: Optional[BookingOwner] = None

class BookingCreateResponse(BaseModel):
    success: bool = True
    message: str
    booking: Booking

class BookingVerificationResponse(BaseModel):
    """Response from a successful ticket redemption"""
    success: bool = True
    message: str
    booking: Booking

class PaginatedBookings(BaseModel):
    success: bool = True
    current_page: int
    total_pages: int
    total_bookings: int
    results: int
    data: List[Booking]

class PaginatedAdminBookings(PaginatedBookings):
    data: List[AdminBooking]

class BookingSearchFilters(BaseModel):
    """Admin booking search filters"""
    status: Optional[str] = None
    is_verified: Optional[bool] = None
    check_in_from: Optional[date] = None
    check_in_to: Optional[date] = None
    user_id: Optional[int] = None
    search: Optional[str] = None

# Occupancy
class DateOccupancyEntry(BaseModel):
    booking_id: int
    check_in_date: datetime
    check_out_date: datetime
    number_of_person: int

class DateOccupancy(BaseModel):
    """Bookings whose stay covers a given date, without guest details"""
    success: bool = True
    day: date
    total_bookings: int
    total_guests: int
    bookings: List[DateOccupancyEntry]

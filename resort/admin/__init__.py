"""
Admin Module

Administrative endpoints for resort staff:
- Booking listing with filters and pagination
- Booking detail with the booking owner
- Booking export to CSV / Excel
"""

from .router import router

__all__ = ["router"]

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from resort.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the store hands back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserRole(str, Enum):
    """User role enumeration"""
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class BookingStatus(str, Enum):
    """Booking status enumeration"""
    SUCCESS = "success"


# ================================
# Users
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False, default="")
    role = Column(String(20), nullable=False, default=UserRole.USER.value)

    # Profile
    phone = Column(String(50))
    address = Column(String(500))
    avatar = Column(String(500))
    bio = Column(Text)
    google_id = Column(String(255), unique=True)

    # Password reset
    reset_otp_hash = Column(String(255))
    reset_otp_expires_at = Column(DateTime)
    reset_otp_verified = Column(Boolean, nullable=False, default=False)
    reset_otp_attempts = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    bookings = relationship("Booking", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value)

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    guest_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    check_in_date = Column(DateTime, nullable=False, index=True)
    check_out_date = Column(DateTime, nullable=False)
    number_of_person = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.SUCCESS.value)
    is_verified = Column(Boolean, nullable=False, default=False, index=True)
    verified_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")

# ================================
# Visit Analytics
# ================================
class VisitCounter(Base):
    __tablename__ = "visit_counters"

    key = Column(String(100), primary_key=True)
    count = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

class VisitLog(Base):
    __tablename__ = "visit_logs"
    __table_args__ = (
        Index("ix_visit_logs_key_visitor_created", "key", "visitor_hash", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), nullable=False)
    visitor_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

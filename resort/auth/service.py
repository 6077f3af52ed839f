import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resort.auth.schemas import UserCreate
from resort.auth.utils import get_password_hash, verify_password
from resort.config import settings
from resort.models import User, UserRole, utcnow

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def create_user(db: Session, user: UserCreate, role: UserRole = UserRole.USER) -> User:
        """Create a new user"""
        if UserService.get_user_by_email(db, user.email):
            raise ValueError("User with this email already exists")

        db_user = User(
            name=user.name,
            email=user.email.lower(),
            password=get_password_hash(user.password),
            role=role.value
        )

        try:
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            db.rollback()
            raise ValueError("User with this email already exists")

        logger.info("Registered %s account %s", role.value, db_user.id)
        return db_user

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """Authenticate user with email and password"""
        user = UserService.get_user_by_email(db, email)
        if not user:
            return None
        if not verify_password(password, user.password):
            return None
        return user

    @staticmethod
    def get_or_create_google_user(db: Session, email: str, name: Optional[str], google_id: Optional[str]) -> User:
        """Find the account for a Google identity, creating a passwordless one on first login"""
        user = UserService.get_user_by_email(db, email)
        if user:
            if google_id and not user.google_id:
                user.google_id = google_id
                db.commit()
                db.refresh(user)
            return user

        user = User(
            name=name or "Unknown User",
            email=email.lower(),
            password="",  # Google handles authentication
            google_id=google_id,
            role=UserRole.USER.value
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info("Created account %s from Google login", user.id)
        return user

    # Password reset
    @staticmethod
    def start_password_reset(db: Session, email: str) -> Optional[str]:
        """Store a hashed one-time code for ``email`` and return the plain code.

        Returns None when no account exists for the address.
        """
        user = UserService.get_user_by_email(db, email)
        if not user:
            return None

        otp = f"{secrets.randbelow(10 ** 6):06d}"
        user.reset_otp_hash = get_password_hash(otp)
        user.reset_otp_expires_at = utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        user.reset_otp_verified = False
        user.reset_otp_attempts = 0
        db.commit()
        return otp

    @staticmethod
    def verify_reset_otp(db: Session, email: str, otp: str) -> bool:
        """Check the reset code and mark it verified"""
        user = UserService.get_user_by_email(db, email)
        if not user or not user.reset_otp_hash or not user.reset_otp_expires_at:
            return False
        if user.reset_otp_expires_at < utcnow():
            return False
        if not verify_password(otp, user.reset_otp_hash):
            user.reset_otp_attempts = (user.reset_otp_attempts or 0) + 1
            if user.reset_otp_attempts >= settings.OTP_MAX_ATTEMPTS:
                # Burn the code; a new one has to be requested
                user.reset_otp_hash = None
                user.reset_otp_expires_at = None
                logger.warning("Reset code for account %s discarded after %s failed attempts",
                               user.id, user.reset_otp_attempts)
            db.commit()
            return False

        user.reset_otp_verified = True
        db.commit()
        return True

    @staticmethod
    def reset_password(db: Session, email: str, new_password: str) -> bool:
        """Set a new password once the reset code has been verified"""
        user = UserService.get_user_by_email(db, email)
        if not user or not user.reset_otp_verified:
            return False
        if not user.reset_otp_expires_at or user.reset_otp_expires_at < utcnow():
            return False

        user.password = get_password_hash(new_password)
        user.reset_otp_hash = None
        user.reset_otp_expires_at = None
        user.reset_otp_verified = False
        user.reset_otp_attempts = 0
        db.commit()

        logger.info("Password reset for account %s", user.id)
        return True

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resort.models import User
from resort.users.schemas import UserProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    @staticmethod
    def update_profile(db: Session, user: User, profile_update: UserProfileUpdate) -> User:
        """Apply the non-empty fields of ``profile_update`` to ``user``"""
        update_data = {
            field: value
            for field, value in profile_update.dict(exclude_unset=True).items()
            if value
        }
        if not update_data:
            raise ValueError("Please provide at least one field to update")

        if "email" in update_data:
            update_data["email"] = update_data["email"].lower()
            existing = db.query(User).filter(User.email == update_data["email"], User.id != user.id).first()
            if existing:
                raise ValueError("Email already exists")

        for field, value in update_data.items():
            setattr(user, field, value)

        try:
            db.commit()
            db.refresh(user)
        except IntegrityError:
            db.rollback()
            raise ValueError("Email already exists")

        logger.info("Updated profile fields %s for user %s", sorted(update_data), user.id)
        return user

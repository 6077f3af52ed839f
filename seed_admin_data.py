#!/usr/bin/env python3
"""
Admin Seed Data Script

Creates the initial super admin account for the Gartang Gali Resort API.
Run it once after the database has been created. Credentials come from the
SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD / SEED_ADMIN_NAME environment variables.

Usage:
    python seed_admin_data.py
"""

import os
import sys

from pydantic import ValidationError
from sqlalchemy.orm import Session

from resort.auth.schemas import UserCreate
from resort.auth.utils import get_password_hash
from resort.config import settings
from resort.database import Database
from resort.models import User, UserRole

def build_admin_account(email: str, password: str, name: str) -> UserCreate:
    """Validate the seed credentials the same way registration does"""
    return UserCreate(name=name, email=email, password=password)

def create_super_admin(db: Session, account: UserCreate) -> bool:
    """Create the super admin user, returning False when it already exists"""
    print("🔧 Creating super admin user...")

    email = account.email.lower()
    existing_admin = db.query(User).filter(User.email == email).first()
    if existing_admin:
        print("✅ User already exists, skipping...")
        return False

    super_admin = User(
        name=account.name,
        email=email,
        password=get_password_hash(account.password),
        role=UserRole.SUPER_ADMIN.value
    )
    db.add(super_admin)
    db.commit()

    print(f"✅ Created super admin: {super_admin.email}")
    return True

def main():
    email = os.environ.get("SEED_ADMIN_EMAIL")
    password = os.environ.get("SEED_ADMIN_PASSWORD")
    name = os.environ.get("SEED_ADMIN_NAME", "Resort Administrator")

    if not email or not password:
        print("❌ SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set")
        return 1

    try:
        account = build_admin_account(email, password, name)
    except ValidationError as e:
        print(f"❌ Invalid admin credentials: {e}")
        return 1

    database = Database(settings.DATABASE_URL)
    try:
        database.create_all()
        with database.session() as db:
            create_super_admin(db, account)
    finally:
        database.dispose()

    print("🎉 Admin seed data setup completed!")
    return 0

if __name__ == "__main__":
    sys.exit(main())

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from resort.auth.dependencies import get_current_user
from resort.database import get_db
from resort.models import User
from resort.users.schemas import ProfileResponse, UserProfileUpdate
from resort.users.service import ProfileService

router = APIRouter()

@router.get("/me", response_model=ProfileResponse)
def get_user_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return ProfileResponse(message="Profile fetched successfully", user=current_user)

@router.put("/me", response_model=ProfileResponse)
def update_user_profile(
    profile_update: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update current user profile"""
    try:
        updated_user = ProfileService.update_profile(db, current_user, profile_update)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return ProfileResponse(message="User profile updated successfully", user=updated_user)

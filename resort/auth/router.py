import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from resort.auth.dependencies import require_super_admin
from resort.auth.google_oauth import GoogleOAuthClient, GoogleOAuthError, get_google_client
from resort.auth.schemas import (
    AuthResponse, ForgotPasswordRequest, LoginRequest, MessageResponse,
    ResetPasswordRequest, UserCreate, UserResponse, VerifyOTPRequest
)
from resort.auth.service import UserService
from resort.auth.utils import create_access_token
from resort.config import settings
from resort.database import get_db
from resort.mailer import Mailer, get_mailer
from resort.models import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_VERIFIER_COOKIE = "oauth_code_verifier"

def set_auth_cookie(response: Response, token: str, samesite: str = "strict"):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=samesite,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    try:
        db_user = UserService.create_user(db=db, user=user)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    return UserResponse(message="User registered successfully", user=db_user)

@router.post("/createadmin", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_admin(
    user: UserCreate,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Create an admin account (super admin only)"""
    try:
        db_user = UserService.create_user(db=db, user=user, role=UserRole.ADMIN)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    logger.info("Admin %s created by %s", db_user.id, current_user.id)
    return UserResponse(message="Admin created successfully", user=db_user)

@router.post("/login", response_model=AuthResponse)
def login_user(login_data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Log in with email and password"""
    user = UserService.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})
    set_auth_cookie(response, access_token)

    return AuthResponse(message="Login successful", access_token=access_token, user=user)

@router.post("/logout", response_model=MessageResponse)
def logout_user(response: Response):
    """Clear the session cookie"""
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )
    return MessageResponse(message="Logout successful")

# Password reset
@router.post("/forgot-password", response_model=MessageResponse)
def send_forgot_password_otp(
    request: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Email a one-time code for resetting the password"""
    otp = UserService.start_password_reset(db, request.email)
    if otp:
        mailer.send(
            to=request.email,
            subject=f"{settings.RESORT_NAME} password reset code",
            body=(
                f"Your password reset code is {otp}.\n"
                f"It expires in {settings.OTP_EXPIRE_MINUTES} minutes."
            ),
        )
    # Same answer whether or not the account exists
    return MessageResponse(message="If the email is registered, a reset code has been sent")

@router.post("/verify-otp", response_model=MessageResponse)
def verify_forgot_password_otp(request: VerifyOTPRequest, db: Session = Depends(get_db)):
    """Verify the password reset code"""
    if not UserService.verify_reset_otp(db, request.email, request.otp):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired OTP"
        )
    return MessageResponse(message="OTP verified successfully")

@router.post("/reset-password", response_model=MessageResponse)
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password after the reset code was verified"""
    if not UserService.reset_password(db, request.email, request.new_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="OTP not verified or expired"
        )
    return MessageResponse(message="Password reset successfully")

# Google OAuth
@router.get("/google")
def google_login(google: GoogleOAuthClient = Depends(get_google_client)):
    """Redirect to the Google consent screen"""
    if not google.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google login is not configured"
        )

    url, state, code_verifier = google.authorization_url()
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(OAUTH_STATE_COOKIE, state, max_age=600, httponly=True,
                        secure=settings.COOKIE_SECURE, samesite="lax")
    if code_verifier:
        response.set_cookie(OAUTH_VERIFIER_COOKIE, code_verifier, max_age=600, httponly=True,
                            secure=settings.COOKIE_SECURE, samesite="lax")
    return response

@router.get("/google/callback")
def google_callback(
    request: Request,
    code: str = None,
    state: str = None,
    db: Session = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client)
):
    """Finish Google sign-in, set the session cookie and return to the client app"""
    failure_redirect = RedirectResponse(f"{settings.CLIENT_URL.rstrip('/')}/login", status_code=status.HTTP_302_FOUND)

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or state != expected_state:
        logger.warning("Google callback rejected: missing code or state mismatch")
        return failure_redirect

    try:
        profile = google.fetch_profile(code, state, request.cookies.get(OAUTH_VERIFIER_COOKIE))
    except GoogleOAuthError:
        return failure_redirect

    user = UserService.get_or_create_google_user(db, profile.email, profile.name, profile.google_id)
    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})

    response = RedirectResponse(settings.CLIENT_URL, status_code=status.HTTP_302_FOUND)
    set_auth_cookie(response, access_token, samesite="lax")
    response.delete_cookie(OAUTH_STATE_COOKIE)
    response.delete_cookie(OAUTH_VERIFIER_COOKIE)
    return response

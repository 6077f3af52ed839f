from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./resort.db"
    DB_CREATE_TABLES: bool = True
    
    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    AUTH_COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False
    
    # Booking tickets
    BOOKING_TOKEN_SECRET: Optional[str] = None
    BOOKING_TOKEN_EXPIRE_DAYS: int = 30
    CLIENT_URL: str = "http://localhost:5173"
    RESORT_NAME: str = "Gartang Gali Resort"
    
    # Password reset
    OTP_EXPIRE_MINUTES: int = 10
    OTP_MAX_ATTEMPTS: int = 5
    
    # Google OAuth
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/api/v1/auth/google/callback"
    
    # Mail
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = "no-reply@gartanggali.com"
    
    # Visit counter
    VISIT_DEDUP_HOURS: int = 24
    
    # Application
    PROJECT_NAME: str = "Gartang Gali Resort API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_URLS: str = "http://localhost:3000,http://localhost:5173"
    
    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_URLS.split(",") if origin.strip()]
    
    @property
    def booking_token_secret(self) -> str:
        return self.BOOKING_TOKEN_SECRET or self.SECRET_KEY
    
    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

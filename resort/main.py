import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resort.config import settings
from resort.database import Database
from resort.exceptions import register_exception_handlers
from resort.auth import router as auth_router
from resort.users import router as users_router
from resort.bookings import router as bookings_router
from resort.admin import router as admin_router
from resort.visits import router as visits_router

logger = logging.getLogger(__name__)

def configure_logging():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the API. The database handle is opened at startup and disposed at shutdown."""

    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_handle = database or Database(settings.DATABASE_URL)
        if settings.DB_CREATE_TABLES:
            db_handle.create_all()
        app.state.database = db_handle
        logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
        try:
            yield
        finally:
            db_handle.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Gartang Gali Resort booking API",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(
        auth_router.router,
        prefix=f"{settings.API_V1_STR}/auth",
        tags=["Authentication"]
    )

    app.include_router(
        users_router.router,
        prefix=f"{settings.API_V1_STR}/users",
        tags=["Users"]
    )

    app.include_router(
        bookings_router,
        prefix=f"{settings.API_V1_STR}/bookings",
        tags=["Booking & Ticketing"]
    )

    app.include_router(
        admin_router,
        prefix=f"{settings.API_V1_STR}/admin",
        tags=["Admin"]
    )

    app.include_router(
        visits_router.router,
        prefix=f"{settings.API_V1_STR}/visits",
        tags=["Visits"]
    )

    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "message": settings.PROJECT_NAME,
            "version": "1.0.0",
            "docs": "/docs"
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

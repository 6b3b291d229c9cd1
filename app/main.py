"""FastAPI application: main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.database import engine, Base, SessionLocal
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import AppError, global_exception_handler, request_validation_handler

# Import all models so SQLAlchemy knows about them
from app.domain.models.user import User

# Import routers
from app.interfaces.api.auth import router as auth_router
from app.interfaces.api.users import router as users_router

settings = get_settings()

# Configure logging immediately
configure_logging(settings)
logger = structlog.get_logger(__name__)


def seed_super_admin() -> None:
    """Create the configured super admin account if it does not exist yet."""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        logger.info("No seed admin configured")
        return

    from app.application.services.auth_service import AuthService
    from app.application.services.token_service import TokenService
    from app.infrastructure.mailer import SMTPNotifier
    from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
    from app.interfaces.deps import get_password_hasher

    db = SessionLocal()
    try:
        service = AuthService(
            SQLAlchemyUserRepository(db, User),
            get_password_hasher(),
            TokenService(settings),
            SMTPNotifier(settings),
            settings,
        )
        if service.seed_super_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_FULLNAME):
            logger.info("Default super admin created", email=settings.ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Portal backend...", env=settings.ENVIRONMENT)

    if not settings.SECRET_KEY:
        logger.warning("SECRET_KEY is empty; token issuance will fail")

    # Create DB tables (dev only; use migrations in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    seed_super_admin()

    yield

    engine.dispose()
    logger.info("Portal backend stopped")


app = FastAPI(
    title="Portal Backend",
    description="Membership portal API: accounts, email verification and role-based access",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Global Exception Handling
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS (added last so it runs first)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)


@app.get("/")
def root():
    return {
        "name": "Portal Backend",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentdesk.config import settings

__version__ = "1.0.0"

# Configuration du logging
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Build the API application
    """
    from talentdesk import models  # noqa: F401
    from talentdesk.exception_handlers import setup_exception_handlers
    from talentdesk.routers import (
        auth, users, talents, partners, marques, negociations,
        collaborations, documents, entreprises, notifications
    )

    app = FastAPI(
        title="TalentDesk API",
        description="Back-office API for a talent management agency",
        version=__version__
    )

    # CORS middleware configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # Include routers
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(talents.router, prefix="/talents", tags=["Talents"])
    app.include_router(partners.router, prefix="/partners", tags=["Partners"])
    app.include_router(marques.router, prefix="/marques", tags=["Brands"])
    app.include_router(negociations.router, prefix="/negociations", tags=["Negotiations"])
    app.include_router(collaborations.router, prefix="/collaborations", tags=["Collaborations"])
    app.include_router(documents.router, prefix="/documents", tags=["Quotes and Invoices"])
    app.include_router(entreprises.router, prefix="/entreprises", tags=["Company registry"])
    app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Welcome to TalentDesk API",
            "version": __version__,
            "documentation": "/docs"
        }

    logger.info("TalentDesk API ready")
    return app

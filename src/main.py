"""
Main FastAPI application
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.database.connection import init_repository
from src.database.repository import Repository
from src.routes import admin, auth, entries, health, participants


def create_app(repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the application

    Args:
        repository: Storage to use; defaults to the one configured by DATABASE_URL
    """
    app = FastAPI(
        title="Scalp Study Logbook API",
        description="Backend API for the 28-day scalp odor and symptom logbook",
        version="1.0.0"
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.state.repository = repository if repository is not None else init_repository()

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(entries.router, tags=["Logbook"])
    app.include_router(participants.router, tags=["Participants"])
    app.include_router(admin.router, tags=["Admin"])
    return app


app = create_app()

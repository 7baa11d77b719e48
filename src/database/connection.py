"""
Database connection management
"""
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from src.config import settings
from src.database.repository import InMemoryRepository, Repository
from src.database.sql_repository import SqlRepository
from src.utils.url_builder import build_async_url, redact_url, use_session_pooler


def create_engine_from_url(database_url: str, sslmode: Optional[str] = None) -> AsyncEngine:
    """
    Build the async engine for a Supabase Postgres URL

    Args:
        database_url: Database URL from the environment
        sslmode: Explicit SUPABASE_SSLMODE override

    Returns:
        Configured AsyncEngine (no connection is opened yet)
    """
    database_url = use_session_pooler(database_url)
    ssl_required = "sslmode=require" in database_url.lower() or sslmode == "require"

    connect_args = {
        "server_settings": {
            "application_name": "scalp_logbook",
            "tcp_keepalives_idle": "600",
            "tcp_keepalives_interval": "30",
            "tcp_keepalives_count": "3",
        },
        "command_timeout": 60,
        "timeout": 20,
    }
    if ssl_required:
        # Supabase pooler does not need cert verification
        connect_args["ssl"] = True

    return create_async_engine(
        build_async_url(database_url),
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        pool_timeout=30,
        connect_args=connect_args,
        echo=False,
    )


def init_repository() -> Repository:
    """
    Create the repository for this process

    Returns:
        SqlRepository when DATABASE_URL is configured and the engine builds,
        otherwise an empty InMemoryRepository (demo mode)
    """
    database_url = settings.DATABASE_URL
    if not database_url:
        print("Warning: DATABASE_URL not set, using in-memory storage (data is lost on restart)")
        return InMemoryRepository()

    try:
        engine = create_engine_from_url(database_url, settings.SUPABASE_SSLMODE)
        session_maker = async_sessionmaker(bind=engine, expire_on_commit=False)
        print(f"Database engine initialized for {redact_url(database_url)}")
        return SqlRepository(session_maker)
    except Exception as e:
        import traceback
        print(f"Warning: Failed to initialize database engine: {e}")
        traceback.print_exc()
        print("Falling back to in-memory storage")
        return InMemoryRepository()


def get_repository(request: Request) -> Repository:
    """FastAPI dependency returning the application's repository"""
    return request.app.state.repository

"""
Entry point for ASGI servers that expect ``app:app``.

The application lives in src/main.py:
- src/models/ - Pydantic models
- src/routes/ - API endpoints (login, logbook, admin)
- src/services/ - Day status, CSV import/export and study logic
- src/database/ - Repositories (Postgres or in-memory)
- src/utils/ - Validators and helpers
"""
from src.main import app, create_app

__all__ = ['app', 'create_app']

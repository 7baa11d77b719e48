"""
Application configuration
"""
import os
from typing import Optional


class Settings:
    """Application settings"""

    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL", "")
    SUPABASE_SSLMODE: Optional[str] = os.getenv("SUPABASE_SSLMODE")

    # Code typed on the login screen to open the admin panel
    ADMIN_CODE: str = os.getenv("ADMIN_CODE", "9999")

    # Export dates are written in the study site's local calendar
    STUDY_TIMEZONE: str = os.getenv("STUDY_TIMEZONE", "Europe/Paris")

    # CORS settings
    CORS_ORIGINS: list = ["*"]  # Logbook frontend is served from a separate origin
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]


settings = Settings()

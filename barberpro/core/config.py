from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from datetime import date, datetime
from zoneinfo import ZoneInfo
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "BarberPro")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # MongoDB Settings
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "barberpro_db")

    # JWT Auth
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your_secret_key_here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Accounts registered with one of these emails get the admin role
    ADMIN_EMAILS: List[str] = []

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",  # Vite frontend
        "http://localhost:3000",
    ]

    # Email settings (Resend)
    RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "BarberPro <onboarding@resend.dev>")

    # Scheduling
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Sao_Paulo")
    SLOT_INTERVAL_MINUTES: int = int(os.getenv("SLOT_INTERVAL_MINUTES", "30"))

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

settings = Settings()


def local_now() -> datetime:
    """Current wall-clock time in the shop's timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def local_today() -> date:
    """Current calendar day in the shop's timezone."""
    return local_now().date()

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Síndico API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend (checkout redirects + CORS)
    # -------------------------------------------------
    FRONTEND_URL: str = Field("http://localhost:5173", env="FRONTEND_URL")
    EXTRA_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Auth, DB, Storage)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    MAINTENANCE_PHOTOS_BUCKET: str = "maintenance-photos"
    REPORTS_BUCKET: str = "reports"
    PHOTO_MAX_BYTES: int = Field(10 * 1024 * 1024, description="Per-file photo limit (default: 10MB)")

    # -------------------------------------------------
    # SMTP Email (supplier contact)
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = Field(None, env="SMTP_HOST")
    SMTP_PORT: Optional[int] = Field(None, env="SMTP_PORT")
    SMTP_USER: Optional[str] = Field(None, env="SMTP_USER")
    SMTP_PASS: Optional[str] = Field(None, env="SMTP_PASS")

    # -------------------------------------------------
    # Stripe Payment Processing
    # -------------------------------------------------
    STRIPE_SECRET_KEY: Optional[str] = Field(None, env="STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(None, env="STRIPE_WEBHOOK_SECRET")

    # Turn off only for local development without Stripe
    SUBSCRIPTION_GATING_ENABLED: bool = True

    # -------------------------------------------------
    # Notifications / Scheduler
    # -------------------------------------------------
    OVERDUE_AFTER_DAYS: int = Field(7, description="Days an open request may wait before an overdue warning")
    SCHEDULER_ENABLED: bool = False

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

frontend = settings.FRONTEND_URL
if frontend:
    if not frontend.startswith("http"):
        frontend = f"https://{frontend}"
    cors_origins.append(frontend.rstrip("/"))

cors_origins.extend([d.rstrip("/") for d in settings.EXTRA_CORS_ORIGINS])

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))

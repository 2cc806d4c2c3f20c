"""
MedZeal Backend: Application Configuration
===========================================

What:  Centralized configuration loaded with Pydantic Settings.
How:   Environment variables (or a .env file) are read once, type-coerced and
       range-checked into the `settings` singleton.
Who:   Imported by every module that needs a configuration value.

Groups:
    Firebase     where the realtime database lives and how we authenticate
    Clinic       branding used in emails, local time zone for due dates
    SMTP         outbound mail for appointment confirmations
    Files        blog thumbnail storage
    Server       host/port, CORS, log level
    Resilience   mail retry policy, circuit breaker, write rate limit
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults are development-friendly. Production must set the Firebase
    database URL and SMTP credentials.
    """

    # ── Firebase Realtime Database ────────────────────────────────────────
    firebase_database_url: str = Field(
        default="https://medzeal-c5d31-default-rtdb.firebaseio.com",
        description="Realtime Database URL of the clinic project",
    )

    # Path to a service-account JSON file.
    # Empty string: use Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS, GCE metadata).
    firebase_credentials_path: str = Field(default="")

    # Start push listeners on vendors/appointments/blogs at startup.
    # When off, every read falls back to a one-shot GET of the path.
    enable_live_subscriptions: bool = Field(default=True)

    # ── Clinic ────────────────────────────────────────────────────────────
    clinic_name: str = Field(default="MedZeal")
    clinic_logo_url: str = Field(
        default="https://www.medzeal.in/_next/image?url=%2F_next%2Fstatic%2Fmedia%2Fmedzeal.c464cc2f.png"
    )

    # "Today" for credit-cycle due dates is the clinic's calendar day, not UTC's.
    clinic_timezone: str = Field(default="Asia/Kolkata")

    credit_cycle_page_size: int = Field(default=10, ge=1, le=100)

    # ── SMTP ──────────────────────────────────────────────────────────────
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_username: str = Field(default="")
    smtp_password: str = Field(default="")
    smtp_use_tls: bool = Field(default=True)
    smtp_timeout: int = Field(default=30, ge=1, le=300)
    mail_sender: str = Field(default="")

    # ── File Storage ──────────────────────────────────────────────────────
    storage_root: str = Field(default="./storage")

    # 5MB default; the admin UI compresses thumbnails to ~1MB before upload
    max_file_size: int = Field(default=5_242_880, ge=1_048_576, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Comma-separated CORS_ORIGINS as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Mail Retry ────────────────────────────────────────────────────────
    # Tenacity policy for the SMTP hand-off only. Store writes are never retried.
    retry_max_attempts: int = Field(default=3, ge=1, le=10)
    retry_min_wait: int = Field(default=1, ge=0, le=30)
    retry_max_wait: int = Field(default=8, ge=0, le=120)

    # ── Circuit Breaker ───────────────────────────────────────────────────
    cb_failure_threshold: int = Field(default=5, ge=2, le=20)
    cb_recovery_timeout: int = Field(default=60, ge=10, le=300)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Per-IP sliding window, applied to mutating requests only
    rate_limit_requests: int = Field(default=120, ge=10, le=10000)
    rate_limit_window: int = Field(default=60, ge=10, le=86400)  # seconds

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def sender_address(self) -> str:
        """Envelope sender: MAIL_SENDER, else the SMTP login."""
        return self.mail_sender or self.smtp_username

    def validate_required_for_production(self) -> None:
        """
        What:  Checks the settings without which a feature cannot work.
        When:  Called from the lifespan at startup.
        Raises ValueError listing every problem found.
        """
        errors = []
        if not self.firebase_database_url:
            errors.append("FIREBASE_DATABASE_URL is not set.")
        if not self.smtp_username or not self.smtp_password:
            errors.append(
                "SMTP_USERNAME / SMTP_PASSWORD are not set. "
                "Appointment confirmation emails will fail."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()

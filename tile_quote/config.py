"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Tile Quote Engine"
    debug: bool = True
    currency: str = "NGN"

    # ── Pricing profile ──────────────────────────────────
    profile_path: str = ""  # JSON profile; empty = built-in defaults

    # ── Invoicing ────────────────────────────────────────
    invoice_prefix: str = "INV"
    invoice_due_days: int = 7
    default_payment_terms: str = "Due on Receipt"
    default_bank_details: str = (
        "Bank Name: Your Bank\n"
        "Account Name: Your Company Name\n"
        "Account Number: 1234567890"
    )
    default_invoice_notes: str = (
        "Thank you for your business. "
        "Please make payments to the account details above."
    )

    # ── API ──────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()

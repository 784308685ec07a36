"""
leadgrade/config.py — Central configuration loaded from environment variables.
All modules import settings from here; never read os.environ directly elsewhere.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Distribution thresholds ───────────────────────────────────────────────
    grade_a_min_payment: float = Field(
        default=600000,
        ge=0,
        description="Previous-month monthly payment (KRW) at or above which a member is A-eligible",
    )
    grade_b_min_payment: float = Field(
        default=200000,
        ge=0,
        description="Lower bound (KRW, inclusive) of the B-eligible payment band",
    )

    # ── Classification ────────────────────────────────────────────────────────
    tax_delinquency_field: str = Field(
        default="tax_delinquency",
        description="Lead field that forces the default grade when it is exactly True",
    )
    reclassify_default_mode: str = Field(
        default="auto_only",
        pattern="^(all|auto_only)$",
        description="Which leads a reclassification sweep touches when no mode is given",
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level for the scripts")


# Singleton: import this everywhere
settings = Settings()

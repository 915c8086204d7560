"""Configuration management for EMS Billing."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(
        default=Path("./data/tables"),
        description="Directory holding one text file per table",
    )
    output_dir: Path = Field(
        default=Path("./data/files"),
        description="Directory for submission files and payer response files",
    )
    table_delimiter: str = Field(
        default="|",
        description="Field delimiter used by the file table provider",
    )

    # Table names
    billing_codes_table: str = Field(default="BillingCodes")
    appointment_bills_table: str = Field(default="AppointmentBills")
    appointments_table: str = Field(default="Appointments")
    patients_table: str = Field(default="Patients")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_dir: Path = Field(
        default=Path("./data/logs"),
        description="Directory for billing event logs",
    )
    events_enabled: bool = Field(
        default=True,
        description="Write billing events to JSON Lines",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Configuration management for the DrugBot data service.
"""
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env sits at the repository root, three levels above this package
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database Configuration (PostgreSQL)
    drug_database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DRUG_DATABASE_URL", "SUPABASE_DB_URL", "DATABASE_URL"),
    )

    # API Configuration
    api_base_url: str = "http://localhost:8000"
    cors_origins: List[str] = ["*"]

    # Reports
    report_default_table: str = "generic_drugs_wide_view"
    report_page_size: int = 1000
    report_max_page_size: int = 10000
    report_data_row_limit: int = 1000
    distinct_data_debounce_seconds: float = 0.15

    # Export
    export_page_size: int = 1000
    export_filename: str = "drugbot_export.xlsx"

    # Uploads (relative paths resolve against the working directory)
    upload_dir: str = "uploads"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def has_database(self) -> bool:
        """Check if a database connection string is configured"""
        return bool(self.drug_database_url)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings instance loaded from environment
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """
    Reload settings from environment (useful after .env changes).

    Returns:
        Fresh Settings instance
    """
    global _settings
    _settings = Settings()
    return _settings

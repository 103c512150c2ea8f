"""
Configuration management for the ROI simulator.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROI_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Scenario store
    store_backend: Literal["memory", "supabase"] = Field(
        default="memory", description="Where named scenarios are persisted"
    )
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(default=None, description="Supabase service key")
    scenarios_table: str = Field(default="scenarios")
    email_captures_table: str = Field(default="email_captures")

    # Mail (disabled unless host, port, user and password are all set)
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: Optional[int] = Field(default=None)
    smtp_user: Optional[str] = Field(default=None)
    smtp_pass: Optional[str] = Field(default=None)
    smtp_timeout_seconds: float = Field(default=30.0)
    mail_from: Optional[str] = Field(default=None, description="Sender address, defaults to smtp_user")
    public_app_url: str = Field(default="https://example.com", description="Link included in report e-mails")

    # HTTP API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_origins: List[str] = Field(default=["*"])

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    log_dir: Path = Field(default=Path("logs"))

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_pass)

    @property
    def sender(self) -> Optional[str]:
        return self.mail_from or self.smtp_user


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process settings, loaded once from the environment."""
    return Settings()

"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Talkorithm configuration. All values come from environment variables."""

    # Gemini (relay side)
    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.5-flash-lite")
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )

    # Relay server
    relay_host: str = Field(default="0.0.0.0")
    relay_port: int = Field(default=8787)

    # Relay client: where the shell sends chat turns
    relay_url: str = Field(default="")
    relay_timeout_seconds: float = Field(default=60.0)

    # Database
    database_path: Path = Field(default=Path("data/talkorithm.db"))

    # Turso (hosted libSQL): when set, overrides local database_path
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Conversation
    thread_id: str = Field(default="main")
    message_window_size: int = Field(default=100)
    memory_window_size: int = Field(default=24)
    memory_summary_size: int = Field(default=8)

    # Local identity (console sign-in)
    local_account_id: str = Field(default="local")
    local_display_name: str = Field(default="Student")
    local_email: str = Field(default="")

    # Voice
    auto_speak: bool = Field(default=True)
    auto_send_voice: bool = Field(default=True)
    speech_language: str = Field(default="en-US")

    # Sketchpad
    board_width: int = Field(default=520)
    board_height: int = Field(default=260)
    board_pixel_ratio: float = Field(default=1.0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=_env_file(), env_file_encoding="utf-8", extra="forbid"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def gemini_endpoint(self) -> str:
        """Full generateContent URL for the configured model (without the key)."""
        base = self.gemini_api_base.rstrip("/")
        return f"{base}/models/{self.gemini_model}:generateContent"


settings = Settings()

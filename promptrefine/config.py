from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=(".env", ".env.local"), env_prefix="PROMPTREFINE_")

    upload_dir: Path = Path("./uploads")
    audit_dir: Path | None = None
    max_file_size: int = 10 * 1024 * 1024
    max_files: int = 5
    max_text_length: int = 5000
    ocr_language: str = "eng"
    ocr_preprocess: bool = True
    default_style: str = "general"
    default_max_length: int = 500
    default_temperature: float = 0.7
    max_requirements: int = 15
    max_constraints: int = 10

    @field_validator(
        "max_file_size",
        "max_files",
        "max_text_length",
        "default_max_length",
        "max_requirements",
        "max_constraints",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            msg = "limits must be positive"
            raise ValueError(msg)
        return value

    @field_validator("default_temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            msg = "default_temperature must be between 0 and 1"
            raise ValueError(msg)
        return value


settings = Settings()


__all__ = ["Settings", "settings"]

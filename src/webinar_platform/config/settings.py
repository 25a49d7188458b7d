"""Centralized settings management using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Filesystem locations shared by all analyses."""

    model_config = SettingsConfigDict(env_prefix="")

    uploads_dir: Path = Field(default=Path("uploads"), description="Uploaded decks and extracted images")
    slides_dir: Path = Field(default=Path("slides"), description="Generated presentations")
    data_dir: Path = Field(default=Path("data"), description="JSON data files and audit log")
    public_uploads_prefix: str = Field(
        default="/uploads",
        description="URL prefix under which uploads_dir is served",
    )


class AnalysisSettings(BaseSettings):
    """Presentation import and repetitive-content filtering."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    min_fraction: float = Field(default=0.6, description="Share of slides a line/image must appear on")
    pattern_fraction: float = Field(
        default=0.3,
        description="Lower share for lines matching boilerplate patterns",
    )
    min_length: int = Field(default=3, description="Shortest line considered")
    max_length: int = Field(default=200, description="Longest line considered")
    filter_repetitive: bool = Field(default=True, description="Strip deck-wide headers/footers/logos")
    pptx_paragraph_breaks: bool = Field(
        default=False,
        description="Join PPTX paragraphs with newlines instead of spaces",
    )
    pdf_text_preview_length: int = Field(
        default=500,
        description="Characters of page text shown when no page image exists",
    )

    @field_validator("min_fraction", "pattern_fraction")
    @classmethod
    def validate_fraction(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError("Fraction must be between 0 and 1")
        return v


class ToolSettings(BaseSettings):
    """External command-line tools."""

    model_config = SettingsConfigDict(env_prefix="TOOLS_")

    pdftoppm_binary: str = Field(default="pdftoppm", description="poppler-utils rasterizer")
    libreoffice_binary: str = Field(default="libreoffice", description="LibreOffice executable")
    rasterize_timeout: float = Field(default=120.0, description="pdftoppm timeout in seconds")
    convert_timeout: float = Field(default=60.0, description="LibreOffice timeout in seconds")


class ProgressSettings(BaseSettings):
    """Analysis progress sessions."""

    model_config = SettingsConfigDict(env_prefix="PROGRESS_")

    poll_interval: float = Field(default=0.5, description="Seconds between progress events")
    linger: float = Field(default=1.0, description="Seconds before a terminal session is deleted")
    ttl_seconds: float = Field(default=600.0, description="Idle time after which sessions expire")


class QuizSettings(BaseSettings):
    """Learning-control (quiz) evaluation."""

    model_config = SettingsConfigDict(env_prefix="QUIZ_")

    passing_percentage: int = Field(default=70, ge=0, le=100, description="Minimum percentage to pass")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    format: Literal["json", "console"] = Field(default="json", description="Log format")


class Settings(BaseSettings):
    """Main settings class aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    progress: ProgressSettings = Field(default_factory=ProgressSettings)
    quiz: QuizSettings = Field(default_factory=QuizSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

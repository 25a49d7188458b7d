"""Configuration module for the webinar platform."""

from webinar_platform.config.logging_setup import configure_logging
from webinar_platform.config.settings import (
    AnalysisSettings,
    LoggingSettings,
    ProgressSettings,
    QuizSettings,
    Settings,
    StorageSettings,
    ToolSettings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "StorageSettings",
    "AnalysisSettings",
    "ToolSettings",
    "ProgressSettings",
    "QuizSettings",
    "LoggingSettings",
]

"""File-based persistence: JSON documents and the audit log."""

from webinar_platform.storage.audit import AuditLog
from webinar_platform.storage.json_store import (
    RESULTS_FILE,
    SETTINGS_FILE,
    WEBINARS_FILE,
    JsonStorage,
    initialize_storage,
)

__all__ = [
    "AuditLog",
    "JsonStorage",
    "initialize_storage",
    "SETTINGS_FILE",
    "WEBINARS_FILE",
    "RESULTS_FILE",
]

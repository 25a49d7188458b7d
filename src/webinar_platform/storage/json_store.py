"""Flat JSON file storage."""

import json
import os
import tempfile
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

SETTINGS_FILE = "settings.json"
WEBINARS_FILE = "webinars.json"
RESULTS_FILE = "results.json"


class JsonStorage:
    """One JSON document on disk.

    Writes go to a temporary file that replaces the target, so readers never
    see a half-written document. ``update`` is serialized per instance.
    """

    def __init__(self, filename: str, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.filepath = self.data_dir / filename
        self._lock = threading.Lock()

    def read(self) -> Any | None:
        """Load the document, or None when the file does not exist."""
        try:
            return json.loads(self.filepath.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None

    def write(self, data: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{self.filepath.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.filepath)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def update(self, update_fn: Callable[[Any], Any]) -> Any:
        """Read-modify-write. ``update_fn`` receives ``{}`` when the file is missing."""
        with self._lock:
            data = self.read() or {}
            updated = update_fn(data)
            self.write(updated)
            return updated


def default_documents() -> dict[str, Any]:
    now = datetime.now(timezone.utc).isoformat()
    return {
        SETTINGS_FILE: {"headerTitle": "Webinar Platform", "logoPath": None, "createdAt": now},
        WEBINARS_FILE: {"webinars": []},
        RESULTS_FILE: {"results": []},
    }


def initialize_storage(data_dir: str | Path) -> list[str]:
    """Create missing data files with their defaults.

    Returns:
        Names of the files that were created.
    """
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    created = []
    for filename, default in default_documents().items():
        store = JsonStorage(filename, data_dir)
        if not store.filepath.exists():
            store.write(default)
            created.append(filename)

    if created:
        logger.info("Initialized data files", data_dir=str(data_dir), files=created)
    return created

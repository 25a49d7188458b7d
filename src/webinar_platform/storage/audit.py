"""Append-only audit trail in JSON-lines format."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

AUDIT_FILE = "audit.log"


class AuditLog:
    """Record who did what, one JSON object per line."""

    def __init__(self, data_dir: str | Path, filename: str = AUDIT_FILE):
        self.path = Path(data_dir) / filename

    def log(self, action: str, user: str, message: str, **metadata: Any) -> None:
        """Append an entry. Failures are logged, never raised."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "user": user,
            "message": message,
            **metadata,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.error("Failed to write audit log", path=str(self.path), action=action, error=str(e))

    def read(self, limit: int = 100) -> list[dict[str, Any]]:
        """Most recent entries first."""
        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []

        entries = [json.loads(line) for line in lines if line.strip()]
        return list(reversed(entries[-limit:])) if limit > 0 else []

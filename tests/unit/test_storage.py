"""Unit tests for JSON storage and the audit log."""

from webinar_platform.storage import (
    RESULTS_FILE,
    SETTINGS_FILE,
    WEBINARS_FILE,
    AuditLog,
    JsonStorage,
    initialize_storage,
)


class TestJsonStorage:
    """Tests for JsonStorage."""

    def test_missing_file_reads_none(self, tmp_path):
        assert JsonStorage("missing.json", tmp_path).read() is None

    def test_write_then_read(self, tmp_path):
        store = JsonStorage("data.json", tmp_path / "data")

        store.write({"title": "Präsentation", "items": [1, 2]})

        assert store.read() == {"title": "Präsentation", "items": [1, 2]}
        assert "Präsentation" in store.filepath.read_text(encoding="utf-8")

    def test_write_leaves_no_temp_files(self, tmp_path):
        store = JsonStorage("data.json", tmp_path)

        store.write({"a": 1})
        store.write({"a": 2})

        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_update_starts_from_empty(self, tmp_path):
        """A missing file is updated from an empty document."""
        store = JsonStorage("data.json", tmp_path)

        def add(data):
            data.setdefault("results", []).append({"score": 3})
            return data

        store.update(add)
        result = store.update(add)

        assert result == {"results": [{"score": 3}, {"score": 3}]}
        assert store.read() == result

    def test_initialize_storage(self, tmp_path):
        """Defaults are written once."""
        created = initialize_storage(tmp_path)

        assert sorted(created) == sorted([SETTINGS_FILE, WEBINARS_FILE, RESULTS_FILE])
        assert JsonStorage(WEBINARS_FILE, tmp_path).read() == {"webinars": []}
        assert JsonStorage(SETTINGS_FILE, tmp_path).read()["headerTitle"] == "Webinar Platform"
        assert initialize_storage(tmp_path) == []


class TestAuditLog:
    """Tests for AuditLog."""

    def test_read_newest_first(self, tmp_path):
        audit = AuditLog(tmp_path)
        for n in range(5):
            audit.log("WEBINAR_CREATE", "admin", f"Webinar erstellt: {n}", webinar_id=str(n))

        entries = audit.read(limit=3)

        assert [e["message"] for e in entries] == [
            "Webinar erstellt: 4",
            "Webinar erstellt: 3",
            "Webinar erstellt: 2",
        ]
        assert entries[0]["action"] == "WEBINAR_CREATE"
        assert entries[0]["user"] == "admin"
        assert entries[0]["webinar_id"] == "4"
        assert "timestamp" in entries[0]

    def test_missing_log(self, tmp_path):
        assert AuditLog(tmp_path).read() == []

    def test_write_failure_not_raised(self, tmp_path):
        """An unwritable log location is logged, not raised."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        audit = AuditLog(blocker)

        audit.log("LOGIN", "admin", "Anmeldung")

        assert blocker.read_text() == "file, not a directory"

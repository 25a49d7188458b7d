"""Unit tests for external tool invocation with subprocesses stubbed."""

import asyncio
from pathlib import Path

import pytest

from webinar_platform.errors import ToolExitError, ToolNotFoundError, ToolTimeoutError
from webinar_platform.ingestion import tools


class FakeProcess:
    def __init__(self, returncode=0, stdout=b"", stderr=b"", delay=0.0, on_run=None):
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr
        self._delay = delay
        self._on_run = on_run
        self.killed = False

    async def communicate(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._on_run:
            self._on_run()
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True

    async def wait(self):
        return self.returncode


def install(monkeypatch, process=None, error=None):
    """Replace subprocess creation; returns the list of recorded argv."""
    calls = []

    async def fake_exec(command, *args, **kwargs):
        calls.append([command, *args])
        if error is not None:
            raise error
        return process

    monkeypatch.setattr(tools.asyncio, "create_subprocess_exec", fake_exec)
    return calls


class TestRunTool:
    """Tests for run_tool."""

    def test_success(self, monkeypatch):
        calls = install(monkeypatch, FakeProcess(stdout=b"ok\n"))

        result = asyncio.run(tools.run_tool("pdftoppm", ["-v"], timeout=5))

        assert result.stdout == "ok\n"
        assert calls == [["pdftoppm", "-v"]]

    def test_missing_binary(self, monkeypatch):
        install(monkeypatch, error=FileNotFoundError("pdftoppm"))

        with pytest.raises(ToolNotFoundError) as exc_info:
            asyncio.run(tools.run_tool("pdftoppm", [], timeout=5))

        assert exc_info.value.command == "pdftoppm"

    def test_non_zero_exit(self, monkeypatch):
        install(monkeypatch, FakeProcess(returncode=2, stderr=b"bad input"))

        with pytest.raises(ToolExitError) as exc_info:
            asyncio.run(tools.run_tool("pdftoppm", [], timeout=5))

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "bad input"

    def test_timeout_kills_process(self, monkeypatch):
        process = FakeProcess(delay=5)
        install(monkeypatch, process)

        with pytest.raises(ToolTimeoutError):
            asyncio.run(tools.run_tool("libreoffice", [], timeout=0.01))

        assert process.killed


class TestRasterizePdf:
    """Tests for rasterize_pdf."""

    def test_page_images_sorted_numerically(self, monkeypatch, tmp_path):
        """pdftoppm output is returned in page order with public paths."""
        output_dir = tmp_path / "w1"

        def write_pages():
            for name in ("page-10.png", "page-02.png", "page-1.png", "logo.png"):
                (output_dir / name).write_bytes(b"png")

        calls = install(monkeypatch, FakeProcess(on_run=write_pages))

        images = asyncio.run(tools.rasterize_pdf(Path("deck.pdf"), output_dir, "/uploads/w1/"))

        assert [image.page_number for image in images] == [1, 2, 10]
        assert images[1].filename == "page-02.png"
        assert images[1].public_path == "/uploads/w1/page-02.png"
        assert calls[0] == ["pdftoppm", "deck.pdf", str(output_dir / "page"), "-png"]

    def test_failure_returns_empty(self, monkeypatch, tmp_path):
        """A failing pdftoppm degrades to no images."""
        install(monkeypatch, error=FileNotFoundError("pdftoppm"))

        images = asyncio.run(tools.rasterize_pdf(Path("deck.pdf"), tmp_path / "w1", "/uploads/w1"))

        assert images == []

    @pytest.mark.parametrize(
        "filename,expected",
        [("page-3.png", 3), ("page-03.png", 3), ("page7.png", 7), ("image1.png", None), ("page-3.jpg", None)],
    )
    def test_page_number_of(self, filename, expected):
        assert tools.page_number_of(filename) == expected


class TestConvertToHtml:
    """Tests for LibreOffice conversion."""

    def test_converted_file_returned(self, monkeypatch, tmp_path):
        output_dir = tmp_path / "slides" / "w1"

        def write_html():
            (output_dir / "deck.html").write_text("<html></html>")

        install(monkeypatch, FakeProcess(stdout=b"convert ok", on_run=write_html))

        name = asyncio.run(tools.convert_to_html(tmp_path / "deck.pptx", output_dir))

        assert name == "deck.html"

    def test_placeholder_on_failure(self, monkeypatch, tmp_path):
        """Missing LibreOffice leaves a placeholder page."""
        output_dir = tmp_path / "slides" / "w1"
        install(monkeypatch, error=FileNotFoundError("libreoffice"))

        name = asyncio.run(tools.convert_to_html(tmp_path / "deck.pdf", output_dir))

        assert name == tools.PLACEHOLDER_HTML
        html = (output_dir / name).read_text(encoding="utf-8")
        assert "Platzhalter-Präsentation" in html
        assert "PDF-Datei" in html
